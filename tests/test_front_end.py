import pytest

from pbsat.front_end import (
    Outcome,
    SolverStats,
    TestingParams,
    UsageRequested,
    format_result,
    format_solver_stats,
    format_up_stats,
    get_token,
    open_input,
    parse_testing_params,
    round_time,
    usage_text,
)


def test_get_token_splits_on_tabs():
    assert get_token("\tabc\tdef") == ("abc", "\tdef")


def test_get_token_keeps_spaces():
    assert get_token("a b") == ("a b", "")


def test_get_token_empty_line():
    assert get_token("\t\t") is None
    assert get_token("") is None


def test_get_token_repeated_consumes_line():
    line = "x\ty\tz"
    tokens = []
    while (found := get_token(line)) is not None:
        token, line = found
        tokens.append(token)
    assert tokens == ["x", "y", "z"]


def test_open_input_tries_extensions(tmp_path):
    (tmp_path / "prob.cnf").write_text("p cnf 1 1\n")
    with open_input(str(tmp_path / "prob")) as fh:
        assert fh.read() == "p cnf 1 1\n"


def test_open_input_prefers_zap_over_cnf(tmp_path):
    (tmp_path / "prob.zap").write_text("zap")
    (tmp_path / "prob.cnf").write_text("cnf")
    with open_input(str(tmp_path / "prob")) as fh:
        assert fh.read() == "zap"


def test_open_input_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_input(str(tmp_path / "absent"))


def test_usage_text_layout():
    lines = usage_text().splitlines()
    assert lines[0] == "Command line arguments are: "
    assert lines[1] == "     -c #".ljust(20) + "desired clauseset type 0:CNF, 1:PFS, 2:SYMRES, 3:GROUP_BASED"
    assert len(lines) == 16


def test_parse_empty_gives_defaults():
    assert parse_testing_params([]) == TestingParams()


def test_parse_options():
    params = parse_testing_params(
        ["file.cnf", "-a", "-z", "100", "-t", "2.5", "-c", "1", "-i", "in.txt", "-o", "out.txt"]
    )
    assert params.input_filename == "file.cnf"
    assert params.branching_heuristic_on is False
    assert params.sample_size == 100
    assert params.time_out == 2.5
    assert params.desired_type == 1
    assert params.branch_file_in == "in.txt"
    assert params.branch_file_out == "out.txt"
    assert params.dpll is False


def test_sample_start_turns_on_dpll():
    params = parse_testing_params(["f", "-s", "5"])
    assert params.sample_start_count == 5
    assert params.dpll is True


def test_skipping_flags_swallow_next_argument():
    params = parse_testing_params(["f", "-l", "-d", "-u"])
    assert params.test_local_search_up is True
    assert params.use_structure is False
    assert params.dpll is False


def test_non_numeric_value_reads_as_zero():
    params = parse_testing_params(["f", "-f", "abc", "-m", "7x"])
    assert params.fix_attempts == 0
    assert params.map_attempts == 7


def test_unknown_option_requests_usage():
    with pytest.raises(UsageRequested) as err:
        parse_testing_params(["f", "-q"])
    assert str(err.value) == usage_text()


def test_bare_dash_requests_usage():
    with pytest.raises(UsageRequested):
        parse_testing_params(["f", "-"])


def test_stray_argument_rejected():
    with pytest.raises(ValueError, match="Bad command line argument foo"):
        parse_testing_params(["f", "foo"])


def test_missing_value_rejected():
    with pytest.raises(ValueError):
        parse_testing_params(["f", "-z"])


def test_round_time_minimum():
    assert round_time(0.0) == 0.0001
    assert round_time(0.00001) == 0.0001


def test_round_time_rounds_to_precision():
    assert round_time(1.23456) == 1.2346
    assert round_time(2.5, 0) == 3


def test_round_time_keeps_exact_values():
    assert round_time(0.5) == 0.5


def test_format_result():
    assert format_result(Outcome.UNSAT) == "Result:  UNSAT\n"
    assert format_result(Outcome.SAT) == "Result:  SAT\n"
    assert format_result(Outcome.TIME_OUT) == "Result: TIME_OUT\n"
    assert format_result(Outcome.SAMPLE_FINISHED) == "Result:  SAMPLE_FINISHED\n"
    assert format_result(99) == "Unknown return value \n"


def test_format_up_stats_rows():
    text = format_up_stats(SolverStats(clauses_touched=42), True, 3, 7, 2.0)
    lines = text.splitlines()
    assert lines[0].strip("* ") == "UP Testing Results"
    assert lines[1] == "Solving with DPLL"
    assert lines[2].startswith("sample start".ljust(20) + "sample end".ljust(20))
    assert lines[4].split()[:4] == ["3", "7", "42", "2"]
    assert lines[-1] == "*" * 94


def test_format_up_stats_without_dpll():
    text = format_up_stats(SolverStats(), False, 0, 0, 0.0)
    assert "Solving with DPLL" not in text
    assert text.endswith("\n")


def test_format_solver_stats():
    stats = SolverStats(result=int(Outcome.SAT), number_branch_decisions=12, clauses_touched=30)
    lines = format_solver_stats(stats).splitlines()
    assert lines[0].strip("* ") == "Solver Results"
    assert lines[1].startswith("Result code".ljust(20))
    assert lines[3].split()[:3] == [str(int(Outcome.SAT)), "12", "30"]