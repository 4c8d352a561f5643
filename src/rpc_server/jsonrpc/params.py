from __future__ import annotations

import inspect
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable


class ParamsAdaptationError(ValueError):
    """Request params do not fit the handler's declared parameters."""


@dataclass(frozen=True)
class Parameter:
    name: str
    required: bool = True
    position: int = 0


@dataclass(frozen=True)
class ParameterSpec:
    """Ordered positional parameters of a handler."""

    parameters: tuple[Parameter, ...] = ()
    variadic: bool = False  # handler also takes *args

    @property
    def required_count(self) -> int:
        return sum(1 for p in self.parameters if p.required)

    @property
    def total_count(self) -> int:
        return len(self.parameters)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.parameters]

    @classmethod
    def of(cls, *names: str, optional: Sequence[str] = ()) -> "ParameterSpec":
        """Explicit spec: `ParameterSpec.of("a", "b", optional=["b"])`."""
        opt = set(optional)
        unknown = opt - set(names)
        if unknown:
            raise ValueError(f"optional names not declared: {sorted(unknown)}")
        params = tuple(Parameter(name=n, required=n not in opt, position=i) for i, n in enumerate(names))
        for earlier, later in zip(params, params[1:]):
            if later.required and not earlier.required:
                raise ValueError(f"required parameter {later.name!r} follows optional {earlier.name!r}")
        return cls(parameters=params)

    @classmethod
    def from_callable(cls, fn: Callable[..., Any]) -> "ParameterSpec":
        """
        Reflect the positional parameters of a callable.

        Bound methods already exclude `self`. Keyword-only parameters with
        defaults are ignored; a required keyword-only parameter cannot be fed
        from a positional list, so it is rejected with TypeError.
        """
        try:
            sig = inspect.signature(fn)
        except ValueError as e:
            raise TypeError(f"cannot inspect signature of {fn!r}") from e

        params: list[Parameter] = []
        variadic = False
        for p in sig.parameters.values():
            if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
                params.append(Parameter(name=p.name, required=p.default is inspect.Parameter.empty, position=len(params)))
            elif p.kind is inspect.Parameter.VAR_POSITIONAL:
                variadic = True
            elif p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty:
                raise TypeError(f"required keyword-only parameter {p.name!r} cannot be bound positionally")
        return cls(parameters=tuple(params), variadic=variadic)


def adapt_params(spec: ParameterSpec, params: Any) -> list[Any]:
    """
    Turn request params into a positional argument list for `spec`.

    - absent/None -> empty list (then arity-checked like a list)
    - list -> passed through unchanged when required <= len <= total
    - mapping -> values picked in declared order; a missing optional gets None
    - anything else -> handed over as a single argument, unchecked
    """
    if params is None:
        params = []

    if isinstance(params, list):
        n = len(params)
        upper_ok = spec.variadic or n <= spec.total_count
        if not (spec.required_count <= n and upper_ok):
            raise ParamsAdaptationError(
                "Number of given parameters (%d) does not match the number of expected parameters "
                "(%d required, %d total)" % (n, spec.required_count, spec.total_count)
            )
        return params

    if isinstance(params, Mapping):
        args: list[Any] = []
        for p in spec.parameters:
            if p.name in params:
                args.append(params[p.name])
            elif p.required:
                raise ParamsAdaptationError(f"Parameter {p.name} is missing")
            else:
                args.append(None)
        return args

    return [params]
