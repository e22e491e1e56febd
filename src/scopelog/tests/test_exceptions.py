"""Tests for exception to mapping conversion and cause chains."""

from __future__ import annotations

from scopelog import JsonFormatter, error_to_dict

render = JsonFormatter(compact=True).render


class CodedError(Exception):
    def to_dict(self) -> dict[str, object]:
        return {"code": 7, "message": "overridden"}


def _raised(exc: BaseException) -> BaseException:
    try:
        raise exc
    except BaseException as caught:
        return caught


def test_fixed_keys_come_first() -> None:
    out = error_to_dict(ValueError("bad"), render)
    assert list(out) == ["name", "message", "stack"]
    assert out["name"] == "ValueError"
    assert out["message"] == "bad"


def test_stack_includes_traceback_when_raised() -> None:
    out = error_to_dict(_raised(ValueError("bad")), render)
    assert out["stack"].startswith("Traceback (most recent call last):")
    assert out["stack"].endswith("ValueError: bad")


def test_public_attributes_are_rendered() -> None:
    err = RuntimeError("upstream failed")
    err.status = 503
    err.details = {"host": "db"}
    err._private = "skip"
    out = error_to_dict(err, render)
    assert out["status"] == "503"
    assert out["details"] == '{"host":"db"}'
    assert "_private" not in out


def test_custom_to_dict_overrides() -> None:
    out = error_to_dict(CodedError("original"), render)
    assert out["code"] == 7
    assert out["message"] == "overridden"
    assert out["name"] == "CodedError"


def test_explicit_cause_chain() -> None:
    """Causes from ``raise ... from`` are converted recursively."""
    try:
        try:
            raise KeyError("inner")
        except KeyError as inner:
            raise ValueError("outer") from inner
    except ValueError as err:
        out = error_to_dict(err, render)
    assert out["cause"]["name"] == "KeyError"
    assert "cause" not in out["cause"]


def test_three_level_cause_chain() -> None:
    """Each cause nests under the previous one down to the root."""
    try:
        try:
            try:
                raise OSError("Root cause")
            except OSError as root:
                raise RuntimeError("Middle") from root
        except RuntimeError as middle:
            raise ValueError("Top") from middle
    except ValueError as err:
        out = error_to_dict(err, render)
    assert out["message"] == "Top"
    assert out["cause"]["message"] == "Middle"
    assert out["cause"]["cause"]["message"] == "Root cause"
    assert out["cause"]["cause"]["name"] == "OSError"
    assert "cause" not in out["cause"]["cause"]


def test_implicit_context_is_a_cause() -> None:
    try:
        try:
            raise KeyError("inner")
        except KeyError:
            raise ValueError("while handling")
    except ValueError as err:
        out = error_to_dict(err, render)
    assert out["cause"]["name"] == "KeyError"


def test_suppressed_context_has_no_cause() -> None:
    try:
        try:
            raise KeyError("inner")
        except KeyError:
            raise ValueError("clean") from None
    except ValueError as err:
        out = error_to_dict(err, render)
    assert "cause" not in out


def test_non_exception_cause_is_rendered() -> None:
    err = RuntimeError("x")
    err.cause = {"reason": "timeout"}
    assert error_to_dict(err, render)["cause"] == '{"reason":"timeout"}'


def test_cyclic_cause_chain_is_cut() -> None:
    first, second = ValueError("first"), ValueError("second")
    first.__cause__ = second
    second.__cause__ = first
    out = error_to_dict(first, render)
    assert out["cause"]["message"] == "second"
    assert out["cause"]["cause"] == "[Circular cause]"


def test_self_referencing_attribute() -> None:
    err = RuntimeError("loop")
    err.origin = err
    assert error_to_dict(err, render)["origin"] == "[Circular]"


def test_formatter_format_error_matches() -> None:
    err = ValueError("bad")
    assert JsonFormatter().format_error("err", err) == error_to_dict(err, JsonFormatter().render)
