"""Wraps job callables so every invocation is recorded as a run."""

import functools
import inspect
from typing import Any, Callable, Optional

from .models import JobIdentity
from .registry import JobRegistry


def identity_for(func: Callable[..., Any]) -> JobIdentity:
    """Derive the identity of a job callable.

    Bound methods belong to the class of their instance, functions defined in
    a class body to that class, plain functions to their module. Partials are
    identified by the function they wrap and callable instances by their
    class's ``__call__``.
    """
    func = inspect.unwrap(func)
    while isinstance(func, functools.partial):
        func = inspect.unwrap(func.func)
    if not hasattr(func, "__qualname__"):
        owner = type(func)
        return JobIdentity(type_name=f"{owner.__module__}.{owner.__qualname__}", method_name="__call__")
    if inspect.ismethod(func):
        owner = func.__self__ if inspect.isclass(func.__self__) else type(func.__self__)
        type_name = f"{owner.__module__}.{owner.__qualname__}"
        return JobIdentity(type_name=type_name, method_name=func.__func__.__name__)

    owner_path = func.__qualname__.rpartition(".")[0].replace(".<locals>", "")
    type_name = func.__module__ if not owner_path else f"{func.__module__}.{owner_path}"
    return JobIdentity(type_name=type_name, method_name=func.__name__)


def track_call(registry: JobRegistry, identity: JobIdentity, func: Callable[..., Any], *args, **kwargs) -> Any:
    """Invoke ``func`` between ``run_started`` and ``run_ended``."""
    run_id = registry.run_started(identity)
    error: Optional[BaseException] = None
    try:
        return func(*args, **kwargs)
    except BaseException as e:
        error = e
        raise
    finally:
        registry.run_ended(run_id, identity, error)


def tracked(registry: JobRegistry, identity: Optional[JobIdentity] = None):
    """Decorator form of :func:`track_call`.

    Example:
        @tracked(registry)
        def cleanup():
            ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        job_identity = identity or identity_for(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return track_call(registry, job_identity, func, *args, **kwargs)

        wrapper.job_identity = job_identity
        return wrapper

    return decorator
