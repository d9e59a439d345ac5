"""
Memoization Decorators

Derive cache keys from a function's own parameters and cache its results.

Per-call flow (``memoize``):
    Lookup   -> bind call arguments to the cache's logical keys
    Check    -> cache.get; a non-None value is returned as-is
    Compute  -> call the wrapped function
    Populate -> cache.set with the decorator's TTL; a CacheError here is
                logged and the computed value is still returned
    Return

``invalidate_memoized`` deletes the derived key and then calls the function.
``update_memoized`` calls the function and always repopulates the cache.

Composition:
    Every decoration returns a ``CachedFunction`` holding a ``CallChain``:

        invoke   - what a call runs (the previous layer's invoke, or the
                   function itself for the innermost layer)
        original - the undecorated function

    Keys are always bound against ``original``'s signature, so stacking
    decorators from different caches (with different key sets) works, and
    a miss in an outer layer runs the inner layers so every cache along the
    chain gets populated.

Argument mapping:
    ``args_by_key`` maps each logical key of the cache to a parameter name
    or a position in the original function's parameter list (``self``
    counts as position 0 on methods). When omitted, each logical key maps
    to the parameter of the same name.
"""

import functools
import inspect
import types
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from sugar_cache.core.config.constants import Stage
from sugar_cache.core.exceptions import ArgumentMismatchError, CacheError, ConfigurationError
from sugar_cache.core.logging.logger import log_stage
from sugar_cache.infrastructure.cache.ttl import ResolvedTTL, TTLSpec, resolve_ttl

ArgsByKey = Mapping[str, str | int]


class MemoizingCache(Protocol):
    """What the decorators need from the cache facade."""

    @property
    def keys(self) -> tuple[str, ...]: ...

    @property
    def logger(self) -> Any: ...

    async def get(self, keys: Mapping[str, Any]) -> Any | None: ...

    async def set(self, keys: Mapping[str, Any], value: Any, ttl: TTLSpec) -> None: ...

    async def delete(self, keys: Mapping[str, Any]) -> None: ...


@dataclass(frozen=True)
class CallChain:
    """What a decorated call runs, and the function it was built from."""

    invoke: Callable[..., Awaitable[Any]]
    original: Callable[..., Any]


class CachedFunction:
    """
    Callable returned by the memoization decorators.

    Works as a plain function or as a method (descriptor protocol) and
    carries the original function's name, docstring and ``__wrapped__``.
    """

    def __init__(self, chain: CallChain):
        self._chain = chain
        functools.update_wrapper(self, chain.original)

    @property
    def chain(self) -> CallChain:
        return self._chain

    async def __call__(self, *args, **kwargs) -> Any:
        return await self._chain.invoke(*args, **kwargs)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __repr__(self) -> str:
        return f"<CachedFunction {self._chain.original.__qualname__}>"


def _chain_of(fn: Callable[..., Any]) -> CallChain:
    if isinstance(fn, CachedFunction):
        return fn.chain

    async def invoke(*args, **kwargs):
        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    return CallChain(invoke=invoke, original=fn)


class KeyBinder:
    """
    Maps call arguments of one function onto a cache's logical keys.

    All checks against the function's signature happen in the constructor,
    so a bad mapping fails at decoration time.
    """

    def __init__(self, logical_keys: tuple[str, ...], fn: Callable[..., Any], args_by_key: ArgsByKey | None):
        self._signature = inspect.signature(fn)
        params = list(self._signature.parameters.values())
        mapping = dict(args_by_key) if args_by_key is not None else {k: k for k in logical_keys}
        name = getattr(fn, "__qualname__", repr(fn))

        if set(mapping) != set(logical_keys):
            raise ConfigurationError(
                f"Argument mapping for {name} does not match the cache keys",
                details={
                    "missing": sorted(set(logical_keys) - set(mapping)),
                    "unexpected": sorted(set(mapping) - set(logical_keys)),
                },
            )

        self._param_by_key: dict[str, str] = {}
        for logical, target in mapping.items():
            if isinstance(target, bool) or not isinstance(target, int | str):
                raise ConfigurationError(
                    f"Argument target for {logical!r} must be a parameter name or position",
                    details={"function": name, "target": repr(target)},
                )
            if isinstance(target, int):
                if not 0 <= target < len(params):
                    raise ConfigurationError(
                        f"{name} has no parameter at position {target}",
                        details={"function": name, "key": logical, "parameters": len(params)},
                    )
                param = params[target]
            elif target in self._signature.parameters:
                param = self._signature.parameters[target]
            else:
                raise ConfigurationError(
                    f"{name} has no parameter named {target!r}",
                    details={"function": name, "key": logical, "parameters": [p.name for p in params]},
                )

            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                raise ConfigurationError(
                    f"Cache key {logical!r} cannot come from variadic parameter {param.name!r}",
                    details={"function": name},
                )
            self._param_by_key[logical] = param.name

    @property
    def param_by_key(self) -> dict[str, str]:
        return dict(self._param_by_key)

    def bind(self, args: tuple, kwargs: dict) -> dict[str, str]:
        """
        Resolve the logical key mapping for one call.

        Raises:
            ArgumentMismatchError: If the call is missing a required argument
        """
        try:
            bound = self._signature.bind(*args, **kwargs)
        except TypeError as e:
            raise ArgumentMismatchError.from_exception(e, message=f"Cannot derive cache key: {e}") from e
        bound.apply_defaults()
        return {logical: str(bound.arguments[param]) for logical, param in self._param_by_key.items()}


async def _populate(cache: MemoizingCache, keys: dict[str, str], value: Any, ttl: ResolvedTTL) -> None:
    try:
        await cache.set(keys, value, ttl)
    except CacheError as e:
        cache.logger.warning(
            "Computed value could not be cached",
            stage=Stage.MEMO_POPULATE.value,
            **e.to_dict(),
        )


def _decorated(cache: MemoizingCache, fn: Callable[..., Any], args_by_key: ArgsByKey | None, kind: str):
    chain = _chain_of(fn)
    binder = KeyBinder(cache.keys, chain.original, args_by_key)
    log_stage(
        cache.logger,
        Stage.MEMO_DECORATE,
        "Function decorated",
        level="debug",
        function=getattr(chain.original, "__qualname__", repr(chain.original)),
        decorator=kind,
        args_by_key=binder.param_by_key,
    )
    return chain, binder


def memoize(cache: MemoizingCache, ttl: TTLSpec, args_by_key: ArgsByKey | None = None):
    """Cache the function's result under keys derived from its arguments."""
    resolved = resolve_ttl(ttl)

    def decorator(fn: Callable[..., Any]) -> CachedFunction:
        chain, binder = _decorated(cache, fn, args_by_key, "memoize")

        async def invoke(*args, **kwargs):
            keys = binder.bind(args, kwargs)
            cached = await cache.get(keys)
            if cached is not None:
                log_stage(cache.logger, Stage.MEMO_HIT, "Memoized value returned", level="debug")
                return cached

            log_stage(cache.logger, Stage.MEMO_COMPUTE, "Memoized value computed", level="debug")
            result = await chain.invoke(*args, **kwargs)
            await _populate(cache, keys, result, resolved)
            return result

        return CachedFunction(CallChain(invoke=invoke, original=chain.original))

    return decorator


def invalidate_memoized(cache: MemoizingCache, args_by_key: ArgsByKey | None = None):
    """Delete the derived key, then call the function."""

    def decorator(fn: Callable[..., Any]) -> CachedFunction:
        chain, binder = _decorated(cache, fn, args_by_key, "invalidate_memoized")

        async def invoke(*args, **kwargs):
            keys = binder.bind(args, kwargs)
            await cache.delete(keys)
            log_stage(cache.logger, Stage.MEMO_INVALIDATE, "Memoized value invalidated", level="debug")
            return await chain.invoke(*args, **kwargs)

        return CachedFunction(CallChain(invoke=invoke, original=chain.original))

    return decorator


def update_memoized(cache: MemoizingCache, ttl: TTLSpec, args_by_key: ArgsByKey | None = None):
    """Call the function and store its result, without checking the cache first."""
    resolved = resolve_ttl(ttl)

    def decorator(fn: Callable[..., Any]) -> CachedFunction:
        chain, binder = _decorated(cache, fn, args_by_key, "update_memoized")

        async def invoke(*args, **kwargs):
            keys = binder.bind(args, kwargs)
            result = await chain.invoke(*args, **kwargs)
            await _populate(cache, keys, result, resolved)
            return result

        return CachedFunction(CallChain(invoke=invoke, original=chain.original))

    return decorator
