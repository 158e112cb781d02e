import pytest

from rhiotree.bind import (
    BindError,
    bind_call,
    bind_usage,
    convert_argument,
    make_command,
    type_name,
)


def add(a: int, b: int) -> int:
    return a + b


def scale(a: int, b: float) -> bool:
    return a * b > 0


def echo(text: str) -> str:
    return text


def nothing(flag: bool) -> None:
    return None


def failing(x: int) -> int:
    raise RuntimeError("boom")


@pytest.mark.parametrize("text", ["true", "1"])
def test_bool_true_values(text):
    assert convert_argument(bool, text) is True


@pytest.mark.parametrize("text", ["false", "0", "yes", ""])
def test_bool_other_values_are_false(text):
    assert convert_argument(bool, text) is False


def test_int_conversion_roundtrip():
    assert convert_argument(int, str(-42)) == -42


def test_int_conversion_reads_prefix():
    assert convert_argument(int, "12abc") == 12


def test_int_conversion_invalid():
    with pytest.raises(ValueError):
        convert_argument(int, "abc")


def test_float_conversion_roundtrip():
    assert convert_argument(float, repr(2.5)) == 2.5


def test_str_conversion_identity():
    assert convert_argument(str, "hello world") == "hello world"


def test_unsupported_type_conversion():
    with pytest.raises(TypeError):
        convert_argument(list, "x")


def test_type_names():
    assert type_name(bool) == "bool"
    assert type_name(int) == "int"
    assert type_name(str) == "string"
    assert type_name(dict) == "ERROR"


def test_usage_with_default():
    assert bind_usage(scale, ["", "2.5"]) == "<int> <float|2.5> --> <bool>"


def test_usage_without_default_has_no_bar():
    usage = bind_usage(add, [])
    assert "|" not in usage
    assert usage.count("<int>") == 3


def test_call_converts_and_sums():
    assert bind_call(add, ["2", "3"], []) == str(2 + 3)


def test_call_uses_default():
    assert bind_call(add, ["2"], ["", "3"]) == bind_call(add, ["2", "3"], [])


def test_call_missing_argument():
    with pytest.raises(BindError, match="RhIO bind error at argument 2"):
        bind_call(add, ["2"], [])


def test_call_empty_default_is_missing():
    with pytest.raises(BindError, match="argument 1"):
        bind_call(add, [], ["", "1"])


def test_call_extra_params_ignored():
    assert bind_call(echo, ["a", "b"], []) == "a"


def test_call_bool_result():
    assert bind_call(scale, ["1", "1.0"], []) == "1"
    assert bind_call(scale, ["-1", "1.0"], []) == "0"


def test_call_void_result():
    assert bind_call(nothing, ["true"], []) == ""


def test_make_command_invalid_default_size():
    with pytest.raises(ValueError):
        make_command("add", add, ["1"])


def test_make_command_reports_usage():
    command = make_command("add", add)
    result = command([])
    assert result.startswith("RhIO bind error at argument 1.\nUSAGE: add ")
    assert result.endswith(bind_usage(add, []))


def test_make_command_reports_user_exception():
    command = make_command("fail", failing)
    assert command(["1"]) == "User exception: boom"


def test_make_command_conversion_error_is_user_exception():
    command = make_command("add", add)
    assert command(["x", "1"]).startswith("User exception: ")


def test_make_command_success():
    command = make_command("echo", echo, ["placeholder"])
    assert command([]) == "placeholder"
    assert command(["given"]) == "given"