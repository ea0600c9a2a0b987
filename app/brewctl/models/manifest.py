"""Brewfile manifest models.

A manifest is a line-oriented text file; each entry line declares one
tap, formula, cask or other bundle dependency plus optional parameters.
Parameters are carried verbatim and never interpreted here.

Only ``brew bundle`` executes a Brewfile. Lines that are not simple
entries (Ruby conditionals, ``cask_args``, blocks) are kept as
``unrecognised`` and left for it to interpret.
"""

import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

_ENTRY_RE = re.compile(
    r"""^(?P<kind>[a-z][a-z0-9_]*)\s+
        (?P<quote>["'])(?P<name>[^"']+)(?P=quote)
        (?:\s*,\s*(?P<options>.+?))?
        (?:\s+(?P<guard>(?:if|unless)\s+.+?))?
        (?:\s+\#.*)?\s*$""",
    re.VERBOSE,
)


class ManifestEntry(BaseModel):
    """A single manifest line.

    Attributes:
        kind: Directive (tap, brew, cask, uv, ...).
        name: Quoted subject of the directive.
        options: Raw parameter text after the first comma, if any.
        guard: Trailing ``if``/``unless`` modifier, if any.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Annotated[str, Field(pattern=r"^[a-z][a-z0-9_]*$", description="Bundle directive")]
    name: Annotated[str, Field(min_length=1, description="Tap, formula or cask name")]
    options: Annotated[str | None, Field(description="Raw parameters")] = None
    guard: Annotated[str | None, Field(description="Ruby statement modifier")] = None

    def render(self) -> str:
        """Render the entry back to its manifest line."""
        line = f'{self.kind} "{self.name}"'
        if self.options:
            line += f", {self.options}"
        if self.guard:
            line += f" {self.guard}"
        return line


class Manifest(BaseModel):
    """Ordered sequence of manifest entries.

    Order is preserved on export. Import treats the manifest as a set.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    entries: Annotated[tuple[ManifestEntry, ...], Field(default_factory=tuple)]
    unrecognised: Annotated[
        tuple[str, ...],
        Field(default_factory=tuple, description="Lines that are not simple entries"),
    ]

    @classmethod
    def parse(cls, text: str) -> "Manifest":
        """Parse manifest text.

        Blank lines and ``#`` comments are skipped. Any other line that is
        not a simple entry is collected in ``unrecognised``; parsing never
        fails.
        """
        entries: list[ManifestEntry] = []
        unrecognised: list[str] = []
        for raw in text.splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            match = _ENTRY_RE.match(line)
            if match is None:
                unrecognised.append(line)
                continue
            entries.append(
                ManifestEntry(
                    kind=match.group("kind"),
                    name=match.group("name"),
                    options=match.group("options"),
                    guard=match.group("guard"),
                )
            )
        return cls(entries=tuple(entries), unrecognised=tuple(unrecognised))

    def render(self) -> str:
        """Render entries as manifest text, one per line.

        Unrecognised lines are not rendered since their position is lost.
        """
        return "".join(entry.render() + "\n" for entry in self.entries)

    def names(self, kind: str) -> list[str]:
        """Names of entries of a given kind, in manifest order."""
        return [entry.name for entry in self.entries if entry.kind == kind]

    def counts(self) -> dict[str, int]:
        """Number of entries per directive."""
        counts: dict[str, int] = {}
        for entry in self.entries:
            counts[entry.kind] = counts.get(entry.kind, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self.entries)
