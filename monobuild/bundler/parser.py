"""
Scans ES module import/export declarations.

This is a line-oriented scan, not a full JavaScript parser: declarations are
expected at the start of a line, which is what the downgrade stage emits.
Each import and re-export is replaced in the body by a placeholder token that
the renderer later swaps for the resolved binding code.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union


IMPORT_RE = re.compile(
    r'''^[ \t]*import\s+(?P<clause>[\w$\s{},*]+?)\s*from\s*(?P<q>['"])(?P<source>[^'"]+)(?P=q)[ \t]*;?''',
    re.M,
)
SIDE_EFFECT_IMPORT_RE = re.compile(
    r'''^[ \t]*import\s*(?P<q>['"])(?P<source>[^'"]+)(?P=q)[ \t]*;?''',
    re.M,
)
EXPORT_FROM_RE = re.compile(
    r'''^[ \t]*export\s*(?P<clause>\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s*from\s*(?P<q>['"])(?P<source>[^'"]+)(?P=q)[ \t]*;?''',
    re.M,
)
EXPORT_LIST_RE = re.compile(r'^[ \t]*export\s*\{(?P<names>[^}]*)\}[ \t]*;?', re.M)
EXPORT_DEFAULT_NAMED_RE = re.compile(
    r'^(?P<indent>[ \t]*)export\s+default\s+'
    r'(?P<decl>(?:async\s+)?function\b\s*\*?\s*(?P<fn>[\w$]+)|class\s+(?P<cls>[\w$]+))',
    re.M,
)
EXPORT_DEFAULT_RE = re.compile(r'^(?P<indent>[ \t]*)export\s+default\s+', re.M)
EXPORT_DECL_RE = re.compile(
    r'^(?P<indent>[ \t]*)export\s+'
    r'(?P<decl>(?:async\s+)?function\b\s*\*?\s*(?P<fn>[\w$]+)|class\s+(?P<cls>[\w$]+))',
    re.M,
)
EXPORT_VAR_RE = re.compile(r'^(?P<indent>[ \t]*)export\s+(?P<kind>const|let|var)\b', re.M)
LEFTOVER_EXPORT_RE = re.compile(r'^[ \t]*(?P<keyword>export)\b(?!\s*[:(.=,]).*$', re.M)
IDENTIFIER_RE = re.compile(r'^[A-Za-z_$][\w$]*$')

PLACEHOLDER = '__MONOBUILD_IMPORT_{}__'
DEFAULT_LOCAL = '__default'

OPENERS = {'(': ')', '[': ']', '{': '}'}
CLOSERS = set(OPENERS.values())
QUOTES = "'\"`"
# a line ending in one of these continues the declaration
CONTINUATION_CHARS = ',=+-*/%&|^!?:<>(['


class ModuleSyntaxError(ValueError):
    """Raised for an export form the scanner cannot rewrite"""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(f"line {line}: {message}" if line else message)


@dataclass
class ImportDecl:
    source: str
    default: Optional[str] = None
    namespace: Optional[str] = None
    named: List[Tuple[str, str]] = field(default_factory=list)  # (imported, local)
    side_effect_only: bool = False


@dataclass
class ReExportDecl:
    source: str
    star: bool = False
    star_as: Optional[str] = None
    named: List[Tuple[str, str]] = field(default_factory=list)  # (imported, exported)


@dataclass
class ParsedModule:
    body: str = ""
    imports: List[ImportDecl] = field(default_factory=list)
    reexports: List[ReExportDecl] = field(default_factory=list)
    local_exports: Dict[str, str] = field(default_factory=dict)  # exported -> local
    # declarations in placeholder order
    placeholders: List[Union[ImportDecl, ReExportDecl]] = field(default_factory=list)

    @property
    def sources(self) -> List[str]:
        seen = []
        for decl in [*self.imports, *self.reexports]:
            if decl.source not in seen:
                seen.append(decl.source)
        return seen


def parse_specifiers(text: str) -> List[Tuple[str, str]]:
    """Parse `a, b as c` into [(a, a), (b, c)]"""
    specifiers = []
    for part in text.split(','):
        words = part.split()
        if not words:
            continue
        if len(words) == 3 and words[1] == 'as':
            specifiers.append((words[0], words[2]))
        else:
            specifiers.append((words[0], words[0]))
    return specifiers


def _skip_literal(text: str, i: int) -> Optional[int]:
    """End index of the string literal or comment starting at `i`, or None"""
    char = text[i]
    if char in QUOTES:
        j = i + 1
        while j < len(text) and text[j] != char:
            j += 2 if text[j] == '\\' else 1
        return min(j + 1, len(text))
    if text.startswith('//', i):
        newline = text.find('\n', i)
        return len(text) if newline == -1 else newline
    if text.startswith('/*', i):
        end = text.find('*/', i + 2)
        return len(text) if end == -1 else end + 2
    return None


def code_chars(text: str, start: int = 0) -> Iterator[Tuple[int, str, int]]:
    """
    Yield (index, char, depth) for the code characters of `text`.

    Comments are skipped. A string literal is yielded once, as its closing
    quote. Depth counts the brackets enclosing the character.
    """
    depth = 0
    i = start
    while i < len(text):
        end = _skip_literal(text, i)
        if end is not None:
            if text[i] in QUOTES:
                yield end - 1, text[i], depth
            i = end
            continue
        char = text[i]
        if char in CLOSERS:
            depth -= 1
        yield i, char, depth
        if char in OPENERS:
            depth += 1
        i += 1


def strip_comments(text: str) -> str:
    parts = []
    i = 0
    while i < len(text):
        end = _skip_literal(text, i)
        if end is None:
            parts.append(text[i])
            i += 1
        else:
            parts.append(text[i:end] if text[i] in QUOTES else ' ')
            i = end
    return ''.join(parts)


def split_top_level(text: str, separator: str) -> List[str]:
    """Split on `separator` outside brackets, string literals and comments"""
    parts = []
    start = 0
    for i, char, depth in code_chars(text):
        if char == separator and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return parts


def declaration_extent(code: str, start: int) -> int:
    """
    Find where a variable declaration starting at `start` ends.

    The declaration ends at a top-level `;`, or at a top-level newline when
    the line cannot continue (no trailing comma or operator).
    """
    last = ''
    for i, char, depth in code_chars(code, start):
        if depth == 0 and char == ';':
            return i
        if depth == 0 and char == '\n':
            rest = code[i + 1:].lstrip()
            if last and last not in CONTINUATION_CHARS and not rest.startswith(('.', '?', ':')):
                return i
        if not char.isspace():
            last = char
    return len(code)


def binding_names(pattern: str) -> List[str]:
    """
    Collect the identifiers bound by a declaration target.

    Handles plain identifiers and nested object / array destructuring with
    defaults, renames and rest elements.

    Raises:
        ModuleSyntaxError: If the pattern is not a binding
    """
    pattern = pattern.strip()
    if pattern.startswith('...'):
        return binding_names(pattern[3:])
    if pattern[:1] in ('{', '['):
        closing = OPENERS[pattern[0]]
        if not pattern.endswith(closing):
            raise ModuleSyntaxError(f"Unsupported export binding: {pattern}")
        names = []
        for element in split_top_level(pattern[1:-1], ','):
            element = split_top_level(element, '=')[0].strip()
            if not element:
                continue
            if pattern[0] == '{' and not element.startswith('...'):
                key_value = split_top_level(element, ':')
                element = key_value[-1]
            names.extend(binding_names(element))
        return names
    if not IDENTIFIER_RE.match(pattern):
        raise ModuleSyntaxError(f"Unsupported export binding: {pattern}")
    return [pattern]


def declared_names(declarators: str) -> List[str]:
    """Names bound by the declarator list of a `const`/`let`/`var` statement"""
    names = []
    for declarator in split_top_level(strip_comments(declarators), ','):
        target = split_top_level(declarator, '=')[0]
        if target.strip():
            names.extend(binding_names(target))
    return names


def parse_import_clause(clause: str, source: str) -> ImportDecl:
    decl = ImportDecl(source=source)
    brace = re.search(r'\{([^}]*)\}', clause)
    if brace:
        decl.named = parse_specifiers(brace.group(1))
        clause = clause[:brace.start()] + clause[brace.end():]
    for part in clause.split(','):
        part = part.strip()
        if not part:
            continue
        if part.startswith('*'):
            decl.namespace = part.split()[-1]
        else:
            decl.default = part
    return decl


def parse_module(code: str) -> ParsedModule:
    parsed = ParsedModule()

    def placeholder(decl) -> str:
        parsed.placeholders.append(decl)
        return PLACEHOLDER.format(len(parsed.placeholders) - 1)

    def on_export_from(match):
        clause = match.group('clause').strip()
        decl = ReExportDecl(source=match.group('source'))
        if clause.startswith('*'):
            words = clause.split()
            if len(words) == 3:
                decl.star_as = words[2]
            else:
                decl.star = True
        else:
            decl.named = parse_specifiers(clause.strip('{}'))
        parsed.reexports.append(decl)
        return placeholder(decl)

    def on_import(match):
        decl = parse_import_clause(match.group('clause'), match.group('source'))
        parsed.imports.append(decl)
        return placeholder(decl)

    def on_side_effect_import(match):
        decl = ImportDecl(source=match.group('source'), side_effect_only=True)
        parsed.imports.append(decl)
        return placeholder(decl)

    def on_export_list(match):
        for local, exported in parse_specifiers(match.group('names')):
            parsed.local_exports[exported] = local
        return ''

    def on_export_default_named(match):
        parsed.local_exports['default'] = match.group('fn') or match.group('cls')
        return match.group('indent') + match.group('decl')

    def on_export_default(match):
        parsed.local_exports['default'] = DEFAULT_LOCAL
        return f"{match.group('indent')}var {DEFAULT_LOCAL} = "

    def on_export_decl(match):
        name = match.group('fn') or match.group('cls')
        parsed.local_exports[name] = name
        return match.group('indent') + match.group('decl')

    def on_export_var(match):
        source = match.string
        end = declaration_extent(source, match.end())
        try:
            names = declared_names(source[match.end():end])
        except ModuleSyntaxError as e:
            raise ModuleSyntaxError(str(e), _line_of(source, match.start())) from e
        for name in names:
            parsed.local_exports[name] = name
        return match.group('indent') + match.group('kind')

    code = EXPORT_FROM_RE.sub(on_export_from, code)
    code = IMPORT_RE.sub(on_import, code)
    code = SIDE_EFFECT_IMPORT_RE.sub(on_side_effect_import, code)
    code = EXPORT_LIST_RE.sub(on_export_list, code)
    code = EXPORT_DEFAULT_NAMED_RE.sub(on_export_default_named, code)
    code = EXPORT_DEFAULT_RE.sub(on_export_default, code)
    code = EXPORT_DECL_RE.sub(on_export_decl, code)
    code = EXPORT_VAR_RE.sub(on_export_var, code)

    check_no_leftover_exports(code)
    parsed.body = code
    return parsed


def _line_of(code: str, index: int) -> int:
    return code.count('\n', 0, index) + 1


def check_no_leftover_exports(code: str) -> None:
    """
    Reject `export` statements that none of the rewrites recognised, so they
    never reach the output unchanged.

    Raises:
        ModuleSyntaxError: Naming the first such statement
    """
    leftovers = list(LEFTOVER_EXPORT_RE.finditer(code))
    if not leftovers:
        return
    code_positions = {i for i, _, _ in code_chars(code)}
    for match in leftovers:
        if match.start('keyword') in code_positions:
            raise ModuleSyntaxError(
                f"Unsupported export statement: {match.group(0).strip()}",
                _line_of(code, match.start()),
            )
