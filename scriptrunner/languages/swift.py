"""Swift toolchain and keyword table."""

from scriptrunner.core.language import SCRIPT_PLACEHOLDER, LanguageDescriptor

SWIFT = LanguageDescriptor(
    id="swift",
    display_name="Swift",
    extension="swift",
    command_template=("/usr/bin/env", "swift", SCRIPT_PLACEHOLDER),
)

SWIFT_KEYWORDS = frozenset({
    'associatedtype', 'break', 'case', 'catch', 'class', 'continue',
    'default', 'defer', 'do', 'else', 'enum', 'extension', 'fallthrough',
    'false', 'fileprivate', 'for', 'func', 'guard', 'if', 'import', 'in',
    'init', 'inout', 'internal', 'is', 'let', 'nil', 'open', 'operator',
    'private', 'protocol', 'public', 'repeat', 'rethrows', 'return', 'self',
    'Self', 'static', 'struct', 'subscript', 'super', 'switch', 'throw',
    'throws', 'true', 'try', 'typealias', 'var', 'where', 'while',
})
