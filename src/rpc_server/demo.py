from __future__ import annotations

from .jsonrpc.dispatcher import Fault, JsonRpcAppError


DIVISION_BY_ZERO = 1001
NEGATIVE_INPUT = 1002
NOT_AN_INTEGER = 1003


class CalculatorError(Exception):
    def __init__(self, message: str, code: int, data=None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data


class Calculator:
    """Sample service wired by `config/settings.yaml`."""

    def add(self, a, b):
        return a + b

    def divide(self, a, b):
        if b == 0:
            raise JsonRpcAppError(DIVISION_BY_ZERO, "division by zero", ["errors.division_by_zero"])
        return a / b

    def checked_sqrt(self, x):
        if x < 0:
            return Fault(NEGATIVE_INPUT, "negative input", ["errors.negative_input"])
        return x ** 0.5

    def factorial(self, n):
        if not isinstance(n, int) or n < 0:
            raise CalculatorError("not a natural number", NOT_AN_INTEGER, ["errors.not_an_integer"])
        out = 1
        for i in range(2, n + 1):
            out *= i
        return out

    def greet(self, name, greeting=None):
        return f"{greeting or 'Hello'}, {name}!"
