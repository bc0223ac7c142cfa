"""
Function and constant registry.

The parser consults it to validate function calls and to freeze constants;
the evaluator and printers consult it to run and render function calls.
Registration is expected during setup; lookups may come from several
threads, so every access holds the registry lock.
"""

import logging
import math
import threading

from . import error as E

logger = logging.getLogger(__name__)

VARIADIC = -1

DEFAULT_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
    "infty": 0.0,
}

DEFAULT_CONSTANT_DISPLAY_FORMS = {
    "pi": "π",
    "e": "e",
    "infty": "\\infty",
}


class FunctionDefinition:
    """A callable registered under a name.

    evaluate(walker, args) -> float and render(walker, args) -> str receive
    the unevaluated argument subtrees; `walker` is the Evaluator or Printer
    doing the walk and exposes `.context`, `.registry` and its own
    `.evaluate(node)` / `.render(node)`.
    """
    __slots__ = ("name", "arity", "evaluate", "render", "latex")

    def __init__(self, name, arity, evaluate, render=None, latex=None):
        self.name = name
        self.arity = arity
        self.evaluate = evaluate
        self.render = render or generic_renderer(name)
        self.latex = latex

    def is_variadic(self):
        return self.arity == VARIADIC

    def accepts(self, argument_count):
        return self.is_variadic() or argument_count == self.arity

    def __repr__(self):
        return f"FunctionDefinition({self.name!r}, arity={self.arity})"


def generic_renderer(name):
    """Render a call as name(arg, arg, ...)."""
    def render(walker, args):
        return f"{name}({', '.join(walker.render(arg) for arg in args)})"
    return render


class Registry:
    def __init__(self, constants=None, display_forms=None):
        self._lock = threading.RLock()
        self._functions = {}
        self._constants = dict(DEFAULT_CONSTANTS if constants is None else constants)
        self._display_forms = dict(DEFAULT_CONSTANT_DISPLAY_FORMS if display_forms is None else display_forms)

    # --- Registration ---

    def register_function(self, name, arity, evaluate, render=None, latex=None):
        if not name:
            raise E.RegistryError("Function name must not be empty")
        if not isinstance(arity, int) or arity < VARIADIC:
            raise E.RegistryError(f"Arity of '{name}' must be -1, 0 or a positive integer, got {arity!r}")
        if not callable(evaluate):
            raise E.RegistryError(f"Evaluator of '{name}' is not callable")
        with self._lock:
            if name in self._functions:
                raise E.RegistryError(f"Function '{name}' is already registered")
            definition = FunctionDefinition(name, arity, evaluate, render, latex)
            self._functions[name] = definition
        logger.debug("Registered function %s (arity %d)", name, arity)
        return definition

    def register_constant(self, name, value):
        if not name:
            raise E.RegistryError("Constant name must not be empty")
        with self._lock:
            if name in self._constants:
                raise E.RegistryError(f"Constant '{name}' is already registered")
            self._constants[name] = float(value)
        logger.debug("Registered constant %s = %r", name, value)

    def register_constant_display_form(self, name, rendered_form):
        if not name:
            raise E.RegistryError("Constant name must not be empty")
        with self._lock:
            if name in self._display_forms:
                raise E.RegistryError(f"Display form of '{name}' is already registered")
            self._display_forms[name] = rendered_form

    # --- Lookup: None means "not found" ---

    def get_function(self, name):
        with self._lock:
            return self._functions.get(name)

    def get_constant(self, name):
        with self._lock:
            return self._constants.get(name)

    def get_constant_display_form(self, name):
        with self._lock:
            return self._display_forms.get(name)

    def has_function(self, name):
        with self._lock:
            return name in self._functions

    def has_constant(self, name):
        with self._lock:
            return name in self._constants

    def function_names(self):
        with self._lock:
            return sorted(self._functions)

    def constant_names(self):
        with self._lock:
            return sorted(self._constants)


_default_registry = None
_default_lock = threading.Lock()


def get_default_registry():
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = Registry()
        return _default_registry


def reset_default_registry():
    global _default_registry
    with _default_lock:
        _default_registry = None


def resolve(registry):
    return registry if registry is not None else get_default_registry()
