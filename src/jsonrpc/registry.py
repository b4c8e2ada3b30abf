"""Method registry with namespaced names and lazy namespace factories."""
import functools
import inspect
import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .faults import InvalidParams
from ..utils.errors import FactoryError, RegistrationError

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "."

Params = Any  # list for positional params, dict for keyed params


def split_procedure_name(name: str, separator: str = DEFAULT_SEPARATOR) -> Tuple[str, str]:
    """Split ``name`` on the last separator into ``(namespace, method)``."""
    namespace, _, method = name.rpartition(separator)
    return namespace, method


def join_procedure_name(
    namespace: str, method: str, separator: str = DEFAULT_SEPARATOR
) -> str:
    if namespace:
        return f"{namespace}{separator}{method}"
    return method


def bind_arguments(func: Callable) -> Callable[[Params], Any]:
    """Adapt an ordinary function to the single params-container contract.

    The signature is read once, here. Positional params are bound with
    ``*args`` and keyed params with ``**kwargs``; a mismatch is reported as
    InvalidParams instead of reaching the function.
    """
    signature = inspect.signature(func)

    @functools.wraps(func)
    def adapter(params: Params) -> Any:
        if isinstance(params, Mapping):
            args, kwargs = (), dict(params)
        else:
            args, kwargs = tuple(params), {}
        try:
            signature.bind(*args, **kwargs)
        except TypeError as e:
            raise InvalidParams(data=str(e)) from e
        return func(*args, **kwargs)

    return adapter


def iter_bundle_operations(bundle: Any) -> Iterator[Tuple[str, Callable]]:
    """Yield the public ``(name, callable)`` pairs a bundle exposes.

    A bundle is a mapping of names to callables, a class (only its static and
    class methods, which need no instance), or any other object (its bound
    public methods).
    """
    if isinstance(bundle, Mapping):
        for name, member in bundle.items():
            if not str(name).startswith("_") and callable(member):
                yield name, member
        return

    if inspect.isclass(bundle):
        for name in dir(bundle):
            if name.startswith("_"):
                continue
            raw = inspect.getattr_static(bundle, name)
            if isinstance(raw, (staticmethod, classmethod)):
                yield name, getattr(bundle, name)
        return

    attributes = getattr(bundle, "__dict__", {})
    for name in dir(bundle):
        if name.startswith("_"):
            continue
        # properties and other descriptors are not operations and are not evaluated
        raw = inspect.getattr_static(bundle, name)
        if name in attributes and callable(raw):
            yield name, raw
        elif inspect.isroutine(raw) or isinstance(raw, (staticmethod, classmethod)):
            yield name, getattr(bundle, name)


class Procedure:
    """A callback bound to one fully qualified procedure name."""

    __slots__ = ("name", "callback")

    def __init__(self, name: str, callback: Callable[[Params], Any]):
        self.name = name
        self.callback = callback

    def __call__(self, params: Params) -> Any:
        return self.callback(params)

    def __repr__(self) -> str:
        return f"Procedure({self.name!r})"


class MethodRegistry:
    """Maps procedure names to callbacks.

    Namespace factories are run at most once, on the first lookup miss in
    their namespace, and the service they return is registered in place.
    """

    def __init__(self, separator: str = DEFAULT_SEPARATOR):
        self.separator = separator
        self._procedures: Dict[str, Procedure] = {}
        self._factories: Dict[str, Tuple[Callable[[], Any], bool]] = {}
        self._namespace_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def split(self, name: str) -> Tuple[str, str]:
        return split_procedure_name(name, self.separator)

    def join(self, namespace: str, method: str) -> str:
        return join_procedure_name(namespace, method, self.separator)

    def register_function(
        self,
        name: str,
        callback: Callable,
        namespace: str = "",
        bind_params: bool = False,
    ) -> Procedure:
        """Register ``callback`` as ``namespace.name``.

        Args:
            name: Method name inside the namespace
            callback: Callable receiving the params list or dict
            namespace: Namespace prefix, empty for the root namespace
            bind_params: Spread params over the callback's own signature
        """
        if not callable(callback):
            raise RegistrationError(f"Callback for '{name}' must be callable")
        if bind_params:
            callback = bind_arguments(callback)

        qualified = self.join(namespace, name)
        procedure = Procedure(qualified, callback)
        if qualified in self._procedures:
            logger.info(f"Overwriting JSON-RPC method: {qualified}")
        self._procedures[qualified] = procedure
        logger.info(f"Registered JSON-RPC method: {qualified}")
        return procedure

    def register_object(
        self, bundle: Any, namespace: str = "", bind_params: bool = False
    ) -> List[str]:
        """Register every public operation of ``bundle`` under ``namespace``."""
        names = []
        for name, member in iter_bundle_operations(bundle):
            procedure = self.register_function(name, member, namespace, bind_params)
            names.append(procedure.name)
        return names

    def register_factory(
        self,
        factory: Callable[[], Any],
        namespace: str = "",
        bind_params: bool = False,
    ) -> None:
        """Defer building the service for ``namespace`` until it is first called."""
        if not callable(factory):
            raise RegistrationError("Factory must be callable")
        with self._lock:
            self._factories[namespace] = (factory, bind_params)
        logger.info(f"Registered factory for namespace: '{namespace}'")

    def resolve(self, name: str) -> Optional[Procedure]:
        """Return the procedure for ``name``, running its namespace factory if needed.

        Raises:
            FactoryError: The pending factory for the namespace raised
        """
        procedure = self._procedures.get(name)
        if procedure is not None:
            return procedure

        namespace, _ = self.split(name)
        with self._lock:
            if namespace not in self._factories:
                # a factory is only discarded after its service is registered
                return self._procedures.get(name)
            namespace_lock = self._namespace_locks.setdefault(namespace, threading.Lock())

        with namespace_lock:
            with self._lock:
                pending = self._factories.get(namespace)
            # None when another caller resolved the factory while we waited
            if pending is not None:
                try:
                    self._run_factory(namespace, *pending)
                finally:
                    with self._lock:
                        self._factories.pop(namespace, None)

        return self._procedures.get(name)

    def _run_factory(
        self, namespace: str, factory: Callable[[], Any], bind_params: bool
    ) -> None:
        logger.info(f"Resolving factory for namespace: '{namespace}'")
        try:
            service = factory()
            self.register_object(service, namespace, bind_params)
        except Exception as e:
            logger.error(f"Factory for namespace '{namespace}' failed: {e}", exc_info=True)
            raise FactoryError(namespace, e) from e

    def pending_namespaces(self) -> List[str]:
        with self._lock:
            return list(self._factories)

    def names(self) -> List[str]:
        return list(self._procedures)

    def __contains__(self, name: object) -> bool:
        return name in self._procedures

    def __len__(self) -> int:
        return len(self._procedures)
