"""Kotlin script toolchain and keyword table."""

from scriptrunner.core.language import SCRIPT_PLACEHOLDER, LanguageDescriptor

KOTLIN = LanguageDescriptor(
    id="kotlin",
    display_name="Kotlin",
    extension="kts",
    command_template=("kotlinc", "-script", SCRIPT_PLACEHOLDER),
)

KOTLIN_KEYWORDS = frozenset({
    'as', 'break', 'class', 'companion', 'continue', 'data', 'do', 'else',
    'enum', 'false', 'for', 'fun', 'if', 'import', 'in', 'interface', 'is',
    'null', 'object', 'override', 'package', 'private', 'return', 'sealed',
    'super', 'this', 'throw', 'true', 'try', 'typealias', 'val', 'var',
    'when', 'while',
})
