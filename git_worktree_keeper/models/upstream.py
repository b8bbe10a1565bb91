"""Upstream branch model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UpstreamContext:
    """The remote-tracking branch a worktree is compared against."""

    branch_ref: str
    remote_name: str
    branch_name: str

    @classmethod
    def from_ref(cls, ref: str) -> "UpstreamContext":
        """Build from "<remote>/<branch>", splitting on the first "/" only.

        "origin/release/1.0" gives remote "origin" and branch "release/1.0".
        A ref without "/" is a local branch and has no remote.
        """
        ref = ref.strip()
        remote, sep, branch = ref.partition("/")
        if not sep:
            return cls(branch_ref=ref, remote_name="", branch_name=ref)
        return cls(branch_ref=ref, remote_name=remote, branch_name=branch)

    def __str__(self) -> str:
        return self.branch_ref
