import pytest

from novacalc import MathEngine, error as E
from novacalc.MathEngine import CalculatorEngine, DisplayState, Snapshot
from novacalc.history_store import HistoryStore


def press(engine, keys, precision=2):
    """Feed a key sequence like '200+10%=' into the engine."""
    snapshot = engine.snapshot()
    for key in keys:
        if key.isdigit():
            snapshot = engine.append_digit(key)
        elif key == ".":
            snapshot = engine.append_decimal_point()
        elif key == "=":
            snapshot = engine.finalize(precision)
        elif key == "~":
            snapshot = engine.toggle_sign()
        else:
            snapshot = engine.apply_operator(key)
    return snapshot


@pytest.fixture
def records():
    return []


@pytest.fixture
def engine(records):
    return CalculatorEngine(on_record=lambda expression, result: records.append((expression, result)))


def test_initial_state(engine):
    assert engine.snapshot() == Snapshot("0", "", DisplayState.NORMAL)


def test_digits_concatenate(engine):
    assert press(engine, "123456789012345").operand_text == "123456789012345"


def test_leading_zero_is_replaced(engine):
    assert press(engine, "007").operand_text == "7"


def test_single_decimal_point(engine):
    assert press(engine, "0.5.2").operand_text == "0.52"


def test_operator_pushes_term(engine):
    snapshot = press(engine, "12+")
    assert snapshot.equation_text == "12 + "
    assert snapshot.operand_text == "0"


def test_operator_aliases_are_normalised(engine):
    assert press(engine, "6*").equation_text == "6 × "
    engine.clear_all()
    assert press(engine, "6/").equation_text == "6 ÷ "


def test_second_operator_replaces_first(engine, records):
    snapshot = press(engine, "7+-3=")
    assert snapshot.operand_text == "4"
    assert records == [("7 − 3", "4")]


def test_operator_chain_keeps_last(engine):
    assert press(engine, "7+×−").equation_text == "7 − "


@pytest.mark.parametrize("keys, expected", [
    ("200+10%=", "220"),
    ("200×10%=", "20"),
    ("200−10%=", "180"),
    ("200÷10%=", "2000"),
])
def test_percentage_rules(engine, keys, expected):
    snapshot = press(engine, keys)
    assert snapshot.operand_text == expected
    assert snapshot.equation_text == ""


def test_percentage_uses_running_total(engine):
    # (5 + 200) + 10% of 205
    assert press(engine, "5+200+10%=").operand_text == "225.5"


def test_percentage_record_keeps_buffer_text(engine, records):
    press(engine, "200+10%=")
    assert records == [("200 + 10 %", "220")]


def test_standalone_percent(engine, records):
    snapshot = press(engine, "50%")
    assert snapshot.operand_text == "0.5"
    assert snapshot.equation_text == ""
    assert records == []


def test_operator_after_percent_is_appended(engine):
    snapshot = press(engine, "200+10%+")
    assert snapshot.equation_text == "200 + 10 % + "
    assert press(engine, "5=").operand_text == "205.1"


def test_number_after_percent_means_of(engine):
    assert press(engine, "2+50%4=").operand_text == "10"


def test_left_to_right_evaluation(engine):
    assert press(engine, "1+2×3=").operand_text == "9"


def test_power(engine):
    assert press(engine, "2^10=").operand_text == "1024"


def test_division_by_literal_zero(engine, records):
    snapshot = press(engine, "5÷0=")
    assert snapshot.display_state == DisplayState.ERROR
    assert snapshot.operand_text == "Error"
    assert snapshot.equation_text == ""
    assert engine.last_error.code == "3003"
    assert records == []


def test_division_by_zero_with_decimals_overflows(engine, records):
    snapshot = press(engine, "5÷0.0=")
    assert snapshot.display_state == DisplayState.INFINITY
    assert snapshot.operand_text == "Infinity"
    assert records == []


def test_zero_by_zero_is_error(engine):
    assert press(engine, "0÷0.0=").display_state == DisplayState.ERROR


def test_power_overflow_is_infinity(engine, records):
    snapshot = press(engine, "10^400=")
    assert snapshot.display_state == DisplayState.INFINITY
    assert snapshot.equation_text == ""
    assert records == []


def test_negative_power_overflow_keeps_sign(engine, records):
    snapshot = press(engine, "10~^401=")
    assert snapshot == Snapshot("-Infinity", "", DisplayState.INFINITY)
    assert records == []


def test_even_power_overflow_is_positive(engine):
    assert press(engine, "10~^400=").operand_text == "Infinity"


def test_digit_replaces_exponent_result(engine):
    assert press(engine, "1000000000000^2=").operand_text == "1e+24"
    snapshot = engine.append_digit("5")
    assert snapshot == Snapshot("5", "", DisplayState.NORMAL)


def test_decimal_point_replaces_exponent_result(engine):
    press(engine, "1000000000000^2=")
    assert engine.append_decimal_point().operand_text == "0."


def test_delete_last_resets_exponent_result(engine):
    press(engine, "1000000000000^2=")
    assert engine.delete_last() == Snapshot("0", "", DisplayState.NORMAL)
    assert engine.delete_last().operand_text == "0"


def test_operator_on_exponent_result_stays_parseable(engine):
    press(engine, "1000000000000^2=")
    snapshot = press(engine, "+")
    assert snapshot.equation_text == "1e+24 + "
    assert press(engine, "1=").operand_text == "1e+24"


@pytest.mark.parametrize("edits", ["5", "55", ".", "~", "<", "<<", "<<+", "~<+3"])
def test_buffers_stay_parseable_after_large_result(engine, edits):
    press(engine, "1000000000000^2=")
    for key in edits:
        if key == "<":
            engine.delete_last()
        else:
            press(engine, key)
    snapshot = engine.snapshot()
    assert snapshot.display_state == DisplayState.NORMAL
    MathEngine.parse_operand(snapshot.operand_text)
    if snapshot.equation_text:
        MathEngine.translator(snapshot.equation_text)


def test_delete_last_drops_negative_zero(engine):
    press(engine, "0.~")
    assert engine.snapshot().operand_text == "-0."
    assert engine.delete_last().operand_text == "0"


def test_trailing_operator_is_not_evaluated(engine, records):
    snapshot = press(engine, "7+=")
    assert snapshot.equation_text == "7 + "
    assert snapshot.display_state == DisplayState.NORMAL
    assert records == []


def test_finalize_noop_on_initial_state(engine, records):
    assert press(engine, "=") == Snapshot("0", "", DisplayState.NORMAL)
    assert records == []


def test_finalize_single_operand_is_rounded(engine, records):
    assert press(engine, "3.14159=").operand_text == "3.14"
    assert records == [("3.14159", "3.14")]


@pytest.mark.parametrize("precision, expected", [(2, "0.33"), (0, "0"), (8, "0.33333333")])
def test_precision(engine, precision, expected):
    assert press(engine, "1÷3=", precision=precision).operand_text == expected


def test_invalid_precision_is_rejected(engine):
    with pytest.raises(E.ConfigurationError):
        engine.finalize(9)
    with pytest.raises(E.ConfigurationError):
        engine.apply_scientific("sqrt", -1)


def test_sentinel_blocks_operators(engine):
    press(engine, "5÷0=")
    assert press(engine, "+") == Snapshot("Error", "", DisplayState.ERROR)
    assert engine.apply_scientific("sqrt", 2).operand_text == "Error"
    assert engine.toggle_sign().operand_text == "Error"


def test_digit_escapes_sentinel(engine):
    press(engine, "5÷0=")
    snapshot = engine.append_digit("3")
    assert snapshot == Snapshot("3", "", DisplayState.NORMAL)
    assert engine.last_error is None


def test_decimal_point_escapes_sentinel(engine):
    press(engine, "10^400=")
    assert engine.append_decimal_point().operand_text == "0."


@pytest.mark.parametrize("keys", ["", "12+3", "5÷0=", "10^400=", "50%", "7+"])
def test_clear_all_from_any_state(engine, keys):
    press(engine, keys)
    assert engine.clear_all() == Snapshot("0", "", DisplayState.NORMAL)


def test_delete_last_reaches_zero(engine):
    press(engine, "12.5~")
    seen = []
    for _ in range(8):
        seen.append(engine.delete_last().operand_text)
    assert seen[:4] == ["-12.", "-12", "-1", "0"]
    assert set(seen[3:]) == {"0"}


def test_delete_last_resets_sentinel(engine):
    press(engine, "5÷0=")
    assert engine.delete_last() == Snapshot("0", "", DisplayState.NORMAL)


def test_delete_last_keeps_equation(engine):
    snapshot = press(engine, "12+34")
    snapshot = engine.delete_last()
    assert snapshot.equation_text == "12 + "
    assert snapshot.operand_text == "3"


def test_delete_whole_operand_allows_operator_change(engine):
    press(engine, "7+5")
    engine.delete_last()
    assert press(engine, "×").equation_text == "7 × "


def test_toggle_sign(engine):
    assert engine.toggle_sign().operand_text == "0"
    press(engine, "5")
    assert engine.toggle_sign().operand_text == "-5"
    assert engine.toggle_sign().operand_text == "5"


def test_negative_operand_in_equation(engine):
    assert press(engine, "5~+3=").operand_text == "-2"


def test_constants(engine):
    assert engine.append_constant("pi").operand_text == "3.141592654"
    assert engine.append_constant("e").operand_text == "2.718281828"


def test_unknown_operator_raises(engine):
    with pytest.raises(E.CalculationError) as excinfo:
        engine.apply_operator("&")
    assert excinfo.value.code == "3004"


def test_non_digit_raises(engine):
    with pytest.raises(E.ParseError):
        engine.append_digit("a")


def test_history_keeps_fifty_newest():
    store = HistoryStore()
    engine = CalculatorEngine(on_record=store.add)
    for number in range(1, 52):
        engine.clear_all()
        press(engine, f"{number}+1=")
    assert len(store) == 50
    expressions = [record.expression for record in store]
    assert expressions[0] == "51 + 1"
    assert expressions[-1] == "2 + 1"


# -----------------------------
# Module level helpers
# -----------------------------

@pytest.mark.parametrize("value, precision, expected", [
    (2.0, 4, "2"),
    (1.005, 2, "1.01"),
    (-2.5, 0, "-3"),
    (2.5, 0, "3"),
    (-0.001, 2, "0"),
    (123456789.123, 2, "123456789.12"),
    (1e21, 2, "1e+21"),
    (1e20, 0, "100000000000000000000"),
])
def test_cleanup(value, precision, expected):
    assert MathEngine.cleanup(value, precision) == expected


def test_evaluate_is_left_to_right():
    assert MathEngine.evaluate("2 ^ 3 ^ 2") == 64
    assert MathEngine.evaluate("10 − 4 ÷ 2") == 3


@pytest.mark.parametrize("problem", ["+ 2", "2 2", "2 + ", "2 % %", "abc", ""])
def test_evaluate_rejects_malformed(problem):
    with pytest.raises(E.ParseError):
        MathEngine.evaluate(problem)


def test_literal_zero_division_pattern():
    assert MathEngine.LITERAL_ZERO_DIVISION.search("5 ÷ 0")
    assert MathEngine.LITERAL_ZERO_DIVISION.search("5 ÷ 0 % ")
    assert not MathEngine.LITERAL_ZERO_DIVISION.search("5 ÷ 0.5")
    assert not MathEngine.LITERAL_ZERO_DIVISION.search("5 ÷ 10")
