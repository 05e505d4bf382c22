"""Language descriptor - immutable identity of a supported toolchain."""
from dataclasses import dataclass
from typing import Tuple

# Argument in a command template that is replaced by the scratch file path
SCRIPT_PLACEHOLDER = "{script}"


@dataclass(frozen=True)
class LanguageDescriptor:
    """Immutable description of how to run scripts of one language.

    Frozen for hashability - can be used as dict key.
    """
    id: str
    display_name: str
    extension: str                    # Without the leading dot
    command_template: Tuple[str, ...]

    def __post_init__(self) -> None:
        # Accept lists from settings files, store a tuple
        object.__setattr__(self, 'command_template', tuple(self.command_template))
        if self.command_template.count(SCRIPT_PLACEHOLDER) != 1:
            raise ValueError(
                f"Command template for '{self.id}' must contain "
                f"{SCRIPT_PLACEHOLDER} exactly once: {self.command_template}"
            )

    @property
    def scratch_file_name(self) -> str:
        """File name used for this language's scratch script."""
        return f"script.{self.extension}"

    def build_command(self, script_path: str) -> Tuple[str, ...]:
        """Substitute the script path into the command template."""
        return tuple(
            script_path if arg == SCRIPT_PLACEHOLDER else arg
            for arg in self.command_template
        )

    def to_dict(self) -> dict:
        """Convert to dict for settings serialization."""
        return {
            'id': self.id,
            'display_name': self.display_name,
            'extension': self.extension,
            'command': list(self.command_template),
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'LanguageDescriptor':
        """Create from dict (settings deserialization)."""
        return cls(
            id=d['id'],
            display_name=d.get('display_name', d['id']),
            extension=d['extension'],
            command_template=tuple(d['command']),
        )

    def __str__(self) -> str:
        return self.display_name
