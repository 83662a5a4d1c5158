"""Declarative step chain: names, kinds and dependency edges of every resource.

The provisioning engine does the ordering. This module only records which
declaration must wait on which, and checks the chain is well formed before
anything is submitted.
"""

from dataclasses import dataclass

SECURITY_GROUP = "ec2-runner-sg"
PRIVATE_KEY = "tls-private-key"
KEY_PAIR = "ec2-runner-key"
INSTANCE = "ec2-runner"
PACKAGE = "tar-cmd"
UPLOAD = "upload-server-cmd"
INSTALL = "install-server-cmd"


@dataclass(frozen=True)
class Step:
    """One named resource declaration and the declarations it waits on."""

    name: str
    kind: str
    depends_on: tuple[str, ...] = ()
    fresh: bool = False  # re-executes every run via the trigger token


RUNNER_STEPS = (
    Step(SECURITY_GROUP, "network"),
    Step(PRIVATE_KEY, "credential"),
    Step(KEY_PAIR, "credential", depends_on=(PRIVATE_KEY,)),
    Step(INSTANCE, "instance", depends_on=(SECURITY_GROUP, KEY_PAIR)),
    Step(PACKAGE, "package", depends_on=(INSTANCE,), fresh=True),
    Step(UPLOAD, "transfer", depends_on=(PACKAGE,), fresh=True),
    Step(INSTALL, "install", depends_on=(UPLOAD,), fresh=True),
)


def validate_plan(steps):
    """Check names are unique and every edge points at an earlier step.

    Raises:
        ValueError: on a duplicate name, an unknown dependency or a
            dependency declared after the step that needs it.
    """
    seen = set()
    for step in steps:
        if step.name in seen:
            raise ValueError(f"Duplicate step name '{step.name}'")
        for dep in step.depends_on:
            if dep == step.name:
                raise ValueError(f"Step '{step.name}' depends on itself")
            if dep not in seen:
                known = {s.name for s in steps}
                reason = "is declared after it" if dep in known else "is not declared"
                raise ValueError(f"Step '{step.name}' depends on '{dep}', which {reason}")
        seen.add(step.name)


def get_step(steps, name) -> Step:
    for step in steps:
        if step.name == name:
            return step
    raise KeyError(name)


def dependencies(steps, name) -> set[str]:
    """Direct dependency set of a step."""
    return set(get_step(steps, name).depends_on)


def ancestors(steps, name) -> set[str]:
    """Every step that must complete before `name` can be scheduled."""
    result = set()
    pending = list(get_step(steps, name).depends_on)
    while pending:
        dep = pending.pop()
        if dep in result:
            continue
        result.add(dep)
        pending.extend(get_step(steps, dep).depends_on)
    return result
