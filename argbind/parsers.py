"""
Argbind parser layer: register, partition, bind, dispatch.

What this module provides
- Parser: one node of a command tree. It owns:
  • an arena of ArgumentSpec (positional and optional registrations),
  • the ordered positional indices and the identifier -> index map of optionals,
  • its named sub-parsers (children), at most one of which runs per parse.

Parsing a token range
1. sub-command boundary: the first token naming a child, searched over the whole range.
2. positional run: tokens before the first option-like token (or the boundary);
   allocated across positionals left to right, each slice bound as soon as it is allocated.
3. optional run: identifiers are looked up one by one; each takes up to its
   maximum of the tokens before the next option-like token. The first unknown
   token ends the scan.
4. required optionals that never appeared fail the parse; optional-run leftovers
   are an invalid sub-command choice when the node has children, else unrecognized.
5. dispatch: the child named at the boundary parses the rest of the range.

The first fault stops the parse. Bindings made before it are kept.

Quick start
    from argbind import Parser

    parser = Parser()
    files = parser.add_positional("files", type=str, nargs="+")
    jobs = parser.add_optional("-j", "--jobs", type="unsigned", nargs=1)
    build = parser.add_subparser("build", help="compile the given files")
    release = build.add_optional("-r", "--release", nargs=0)

    parser.parse_cmdline('a.c "b c.c" -j 4 build -r')
    files.values()     # ['a.c', 'b c.c']
    jobs.value()       # 4
    build.exists()     # True
    release.exists()   # True

See also
- argbind.arguments for handles and cardinalities.
- argbind.faults for the fault hierarchy and shell-mode rendering.
"""
import logging
import sys
from collections.abc import Iterable

from rich.console import Group
from rich.text import Text

from .arguments import *
from .faults import *
from .matching import *
from .utils import *

logger = logging.getLogger("argbind.parsers")


def _metavar(spec, prefix_chars, /):
    """
    display label of a spec's values: positional name, or the longest
    identifier without its prefix, uppercased.
    """
    if spec.kind is ArgumentKind.POSITIONAL:
        return spec.identifiers[0]
    return max(spec.identifiers, key=len).lstrip(prefix_chars).upper().replace("-", "_")


def _repeat(label, cardinality, /):
    """
    argparse-like rendering of a cardinality: 'X', '[X]', 'X [X ...]', 'X X [X]'.
    """
    parts = [label] * cardinality.minimum
    if cardinality.unbounded:
        parts.append("[%s ...]" % label)
    else:
        parts.extend(["[%s]" % label] * (cardinality.maximum - cardinality.minimum))
    return " ".join(parts)


def _usage(spec, prefix_chars, /):
    if spec.kind is ArgumentKind.POSITIONAL:
        return _repeat(_metavar(spec, prefix_chars), spec.cardinality)
    usage = " ".join(filter(None, (spec.identifiers[0], _repeat(_metavar(spec, prefix_chars), spec.cardinality))))
    return usage if spec.required else "[%s]" % usage


def _helpline(spec, prefix_chars, /):
    if spec.kind is ArgumentKind.POSITIONAL:
        line = _usage(spec, prefix_chars)
    else:
        values = _repeat(_metavar(spec, prefix_chars), spec.cardinality)
        line = ", ".join(" ".join(filter(None, (identifier, values))) for identifier in spec.identifiers)
    return line + (" " + spec.help if spec.help else "")


def _check_help(name, help, /):
    if not isinstance(help, str | Unset):
        raise TypeError("%s() 'help' must be a string" % name)
    return coalesce(help, "").strip() or None


class Parser:
    """
    A node of the command tree: registrations, children and parse entry points.

    Construction
    - prefix_chars: characters that introduce an option identifier (default "-/").
    - name: display name; sub-parsers get theirs from add_subparser().
    - help: one-line description shown in the parent's help.
    - shell: when True, parse faults are rendered to stderr and the process
      exits with status 1 instead of raising.
    - fancy/colorful: rendering switches for shell mode.

    Children inherit prefix_chars, shell, fancy and colorful.
    """

    __introspectable__ = (
        "name",
        "descr",
        "prefix_chars",
        "shell",
        "fancy",
        "colorful",
    )

    name = mirror("name")
    descr = mirror("descr")
    prefix_chars = mirror("prefix_chars")
    parent = mirror("parent")
    subparsers = mirror("children")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(self, prefix_chars="-/", *, name=Unset, help=Unset, shell=False, fancy=False, colorful=True):
        if not isinstance(prefix_chars, str):
            raise TypeError("Parser() 'prefix_chars' must be a string")
        if not prefix_chars:
            raise ValueError("Parser() 'prefix_chars' cannot be empty")
        if not isinstance(name, str | Unset):
            raise TypeError("Parser() 'name' must be a string")
        if isinstance(name, str) and not (name := name.strip()):
            raise ValueError("Parser() 'name' cannot be empty")
        for flag, value in (("shell", shell), ("fancy", fancy), ("colorful", colorful)):
            if not isinstance(value, bool):
                raise TypeError("Parser() %r must be a boolean" % flag)

        self._prefix_chars = prefix_chars
        self._name = coalesce(name)
        self._descr = _check_help("Parser", help)
        self._shell = shell
        self._fancy = fancy
        self._colorful = colorful
        self._parent = None
        self._children = {}
        self._arena = []
        self._positionals = []
        self._optionals = {}
        self._generation = 0
        self._exists = False

    @property
    def root(self):
        """
        Return the topmost parser of the tree this node belongs to.
        """
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def positionals(self):
        return tuple(self._arena[index].handle for index in self._positionals)

    @property
    def optionals(self):
        return tuple(spec.handle for spec in self._arena if spec.kind is ArgumentKind.OPTIONAL)

    # --- registration ---

    def _register(self, spec, /):
        spec.handle = Argument(self, len(self._arena), self._generation)
        self._arena.append(spec)
        logger.debug("registered %s argument %r on %r", spec.kind.value, spec.options, self._name)
        return spec.handle

    def add_positional(self, name, /, type=str, nargs=Unset, *, help=Unset, default=Unset):
        """
        Register a positional argument and return its handle.

        raises
        - TypeError: name is not a string, or type/nargs/help have the wrong type.
        - ValueError: name is empty, option-like, or already registered.
        """
        if not isinstance(name, str):
            raise TypeError("add_positional() 'name' must be a string")
        if not (name := name.strip()):
            raise ValueError("add_positional() 'name' cannot be empty")
        if isoption(name, self._prefix_chars):
            raise ValueError("add_positional() 'name' cannot look like an option (%r)" % name)
        if any(self._arena[index].identifiers[0] == name for index in self._positionals):
            raise ValueError("add_positional() name %r is already in use" % name)

        spec = ArgumentSpec(
            ArgumentKind.POSITIONAL,
            (name,),
            type,
            Cardinality.of(nargs),
            help=_check_help("add_positional", help),
        )
        self._positionals.append(len(self._arena))
        handle = self._register(spec)
        if default is not Unset:
            handle.assign(default)
        return handle

    def add_optional(self, *identifiers, type=str, nargs=Unset, required=False, help=Unset, default=Unset):
        """
        Register an optional argument under one or more identifiers (e.g. "-o", "--opt").

        raises
        - TypeError: an identifier is not a string, or required/type/nargs/help have the wrong type.
        - ValueError: no identifier, an identifier that is not option-like, or already in use.
        """
        if not identifiers:
            raise ValueError("add_optional() requires at least one identifier")
        if not isinstance(required, bool):
            raise TypeError("add_optional() 'required' must be a boolean")

        sanitized = []
        for identifier in identifiers:
            if not isinstance(identifier, str):
                raise TypeError("add_optional() identifiers must be strings")
            if not isoption(identifier := identifier.strip(), self._prefix_chars):
                raise ValueError(
                    "add_optional() identifier %r must start with one of %r" % (identifier, self._prefix_chars)
                )
            if identifier in self._optionals or identifier in sanitized:
                raise ValueError("add_optional() identifier %r is already in use" % identifier)
            sanitized.append(identifier)

        spec = ArgumentSpec(
            ArgumentKind.OPTIONAL,
            sanitized,
            type,
            Cardinality.of(nargs),
            required=required,
            help=_check_help("add_optional", help),
        )
        index = len(self._arena)
        handle = self._register(spec)
        for identifier in sanitized:
            self._optionals[identifier] = index
        if default is not Unset:
            handle.assign(default)
        return handle

    def add_subparser(self, name, /, *, help=Unset):
        """
        Register and return a child parser reached when `name` appears on the command line.

        raises
        - TypeError: name is not a string.
        - ValueError: name is empty, contains whitespace, is option-like, or is already in use.
        """
        if not isinstance(name, str):
            raise TypeError("add_subparser() 'name' must be a string")
        if not (name := name.strip()):
            raise ValueError("add_subparser() 'name' cannot be empty")
        if any(char.isspace() for char in name):
            raise ValueError("add_subparser() 'name' cannot contain whitespace")
        if isoption(name, self._prefix_chars):
            raise ValueError("add_subparser() 'name' cannot look like an option (%r)" % name)
        if name in self._children:
            raise ValueError("add_subparser() name %r is already in use" % name)

        child = Parser(
            self._prefix_chars,
            name=name,
            help=help,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
        )
        child._parent = self
        self._children[name] = child
        logger.debug("registered sub-parser %r on %r", name, self._name)
        return child

    add_subcommand = add_subparser

    # --- removal and state ---

    def reset(self):
        """
        Clear every binding and existence flag in this subtree; registrations stay.
        """
        self._exists = False
        for spec in self._arena:
            spec.reset()
        for child in self._children.values():
            child.reset()

    def remove_all_arguments(self):
        """
        Unregister every argument of this node. Handles it returned become stale.
        """
        self._arena = []
        self._positionals = []
        self._optionals = {}
        self._generation += 1

    def remove_subparsers(self):
        for child in self._children.values():
            child._parent = None
        self._children = {}

    def clear(self):
        """
        Unregister every argument and sub-parser of this node and forget its last parse.
        """
        self.remove_all_arguments()
        self.remove_subparsers()
        self._exists = False

    def exists(self):
        """
        true when the last parse reached this node (the root, or a dispatched child).
        """
        return self._exists

    def arg_exists(self, *identifiers):
        """
        true when any of the identifiers names a registered argument of this node.
        """
        for identifier in identifiers:
            if not isinstance(identifier, str):
                raise TypeError("arg_exists() arguments must be strings")
        return any(identifier in spec.identifiers for spec in self._arena for identifier in identifiers)

    # --- parsing ---

    def _bind(self, spec, tokens, /):
        for token in tokens:
            spec.bind(token)

    def _parse_positionals(self, tokens, start, stop, /):
        specs = [self._arena[index] for index in self._positionals]
        cursor = start
        for spec, count in zip(specs, allocate((spec.cardinality for spec in specs), stop - start)):
            spec.exists = True
            self._bind(spec, tokens[cursor:cursor + count])
            cursor += count
            if count < spec.cardinality.minimum:
                raise CardinalityMismatchError(spec.handle, count, *spec.cardinality)
        if cursor < stop:
            raise UnrecognizedArgumentsError(tokens[cursor:stop])

    def _parse_optionals(self, tokens, start, stop, /):
        index = start
        while index < stop:
            try:
                spec = self._arena[self._optionals[tokens[index]]]
            except KeyError:
                break
            spec.exists = True
            count = min(seek(tokens, index + 1, stop, self._prefix_chars) - index - 1, spec.cardinality.maximum)
            self._bind(spec, tokens[index + 1:index + 1 + count])
            if count < spec.cardinality.minimum:
                raise CardinalityMismatchError(spec.handle, count, *spec.cardinality)
            index += 1 + count

        for spec in self._arena:
            if spec.kind is ArgumentKind.OPTIONAL and spec.required and not spec.exists:
                raise ArgumentRequiredError(spec.handle)

        if index < stop:
            if self._children:
                raise InvalidChoiceError(tokens[index], self._children)
            raise UnrecognizedArgumentsError(tokens[index:stop])

    def _parse(self, tokens, first, last, /):
        self._exists = True
        boundary = next((index for index in range(first, last) if tokens[index] in self._children), last)
        split = seek(tokens, first, boundary, self._prefix_chars)
        logger.debug(
            "parsing %r: %d positional, %d optional, %d sub-command tokens",
            self._name, split - first, boundary - split, last - boundary,
        )
        self._parse_positionals(tokens, first, split)
        self._parse_optionals(tokens, split, boundary)
        if boundary < last:
            child = self._children[tokens[boundary]]
            logger.debug("dispatching to sub-parser %r", child._name)
            child._parse(tokens, boundary + 1, last)

    @staticmethod
    def _sanitize(tokens, name, /):
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("%s() argument must be an iterable of strings" % name)
        tokens = list(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("%s() argument must be an iterable of strings" % name)
        return tokens

    def trigger(self, fault, /, **options):
        """
        surface a fault with this tree's presentation options (see faults.trigger).
        """
        root = self.root
        trigger(
            fault,
            **options,
            prog=root._name,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
        )

    def parse(self, tokens, /):
        """
        Bind a pre-tokenized argument list.

        Sequence bindings accumulate across calls; call reset() between
        parses of the same registrations.

        raises
        - ParseError (one of its subclasses): the first parse failure, unless
          this parser runs in shell mode, where the fault is rendered and the
          process exits.
        """
        tokens = self._sanitize(tokens, "parse")
        try:
            self._parse(tokens, 0, len(tokens))
        except ParseError as fault:
            if not self._shell:
                raise
            self.trigger(fault)

    def parse_args(self, argv=Unset, /):
        """
        Bind argv, or sys.argv[1:] when omitted.
        """
        self.parse(sys.argv[1:] if argv is Unset else argv)

    def parse_cmdline(self, text, /):
        """
        Split a single command line with utils.split() and bind it.
        """
        if not isinstance(text, str):
            raise TypeError("parse_cmdline() argument must be a string")
        self.parse(split(text))

    def try_parse(self, tokens, /):
        """
        Like parse(), but return the fault (or None) instead of raising it.
        """
        tokens = self._sanitize(tokens, "try_parse")
        try:
            self._parse(tokens, 0, len(tokens))
        except ParseError as fault:
            return fault
        return None

    # --- rendering ---

    def usage(self):
        """
        One-line usage: optionals, then positionals, then the sub-command choice.
        """
        specs = [spec for spec in self._arena if spec.kind is ArgumentKind.OPTIONAL]
        specs += [self._arena[index] for index in self._positionals]
        parts = [_usage(spec, self._prefix_chars) for spec in specs]
        if self._children:
            parts.append("{%s}" % ", ".join(map("'%s'".__mod__, self._children)))
        return " ".join(filter(None, parts))

    def help(self, recursive=False, /, level=0):
        """
        Multi-line help: positional arguments and sub-commands, then optional arguments.

        recursive=True nests each sub-parser's help under its name.
        """
        indent = "    "
        lines = []
        if self._positionals or self._children:
            lines.append(indent * level + "positional arguments:")
            for index in self._positionals:
                lines.append(indent * (level + 1) + _helpline(self._arena[index], self._prefix_chars))
        if self._children:
            lines.append(indent * (level + 1) + "{%s}" % ", ".join(map("'%s'".__mod__, self._children)))
            for name, child in self._children.items():
                if child._descr:
                    lines.append(indent * (level + 1) + "%s %s" % (name, child._descr))
                if recursive:
                    if text := child.help(True, level + 2):
                        lines.append(text.rstrip("\n"))
        optionals = [spec for spec in self._arena if spec.kind is ArgumentKind.OPTIONAL]
        if optionals:
            lines.append(indent * level + "optional arguments:")
            for spec in optionals:
                lines.append(indent * (level + 1) + _helpline(spec, self._prefix_chars))
        return "".join(line + "\n" for line in lines)

    def __rich__(self):
        prog = coalesce(self.root._name, "") if self is self.root else " ".join(self._path())
        usage = " ".join(filter(None, (prog, self.usage())))
        if self._colorful:
            return Group(Text.assemble(("usage: ", "bold"), usage), Text(self.help()))
        return Group(Text("usage: " + usage), Text(self.help()))

    def _path(self):
        path = [node := self]
        while node._parent is not None:
            path.append(node := node._parent)
        return [node._name for node in reversed(path) if node._name]

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "parser(%s)" % ", ".join("%s=%r" % item for item in self.__rich_repr__())


__all__ = (
    "Parser",
)
