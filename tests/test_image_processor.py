import pytest

from binarizer.cli.image_processor import main, parse_args
from binarizer.exceptions import InvalidConfig

from conftest import GRAY_ROW


@pytest.fixture
def bmp(make_bmp):
    return make_bmp("gray.bmp", GRAY_ROW)


def test_help_prints_usage(capsys):
    assert main(["help"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("usage:")
    assert "-P <path>" in out


def test_parse_all_flags(bmp):
    config = parse_args(["-P", str(bmp), "-M", "3", "-T", "100", "-F"])
    assert config.input_path == bmp
    assert config.multithreaded is True
    assert config.pool_size == 3
    assert config.threshold == 100
    assert config.force_grayscale is True


def test_parse_defaults(bmp):
    config = parse_args(["-P", str(bmp)])
    assert (config.multithreaded, config.pool_size, config.threshold, config.force_grayscale) == (False, 5, 127, False)


def test_pool_flag_without_value(bmp):
    config = parse_args(["-M", "-P", str(bmp)])
    assert config.multithreaded is True
    assert config.pool_size == 5


@pytest.mark.parametrize("flag, value, field, default", [
    ("-M", "300", "pool_size", 5),
    ("-M", "0", "pool_size", 5),
    ("-T", "256", "threshold", 127),
])
def test_out_of_range_falls_back_with_warning(bmp, caplog, flag, value, field, default):
    config = parse_args(["-P", str(bmp), flag, value])
    assert getattr(config, field) == default
    assert "Rolling back to the default" in caplog.text


@pytest.mark.parametrize("argv", [
    ["-M", "many"],
    ["-T", "bright"],
    ["-T"],
    ["-F", "-F"],
    ["-T", "1", "-T", "2"],
    ["-M", "-M"],
    ["-T", "-5"],
    ["-M", "-5"],
    ["-X"],
    ["extra"],
])
def test_hard_errors(bmp, argv):
    with pytest.raises(InvalidConfig):
        parse_args(["-P", str(bmp), *argv])


def test_duplicate_path(bmp):
    with pytest.raises(InvalidConfig):
        parse_args(["-P", str(bmp), "-P", str(bmp)])


def test_missing_path_flag():
    with pytest.raises(InvalidConfig, match=r"Mandatory parameter \[-P\]"):
        parse_args(["-F"])


def test_non_existent_path(tmp_path):
    with pytest.raises(InvalidConfig, match="doesn't exist"):
        parse_args(["-P", str(tmp_path / "nope.bmp")])


def test_no_arguments():
    with pytest.raises(InvalidConfig):
        parse_args([])


def test_main_processes_file(bmp, capsys):
    assert main(["-P", str(bmp), "-T", "50"]) == 0
    assert bmp.with_name("gray_BINARIZED.bmp").is_file()
    assert "Finished." in capsys.readouterr().out


def test_main_reports_argument_errors(caplog):
    assert main(["-Q"]) == 1
    assert "Wrong input arguments" in caplog.text
    assert "Type 'help' for more information." in caplog.text


def test_main_reports_empty_directory(tmp_path, caplog):
    assert main(["-P", str(tmp_path), "-M", "2"]) == 1
    assert "Directory is empty!" in caplog.text
    assert "Type 'help' for more information." in caplog.text


def test_main_exit_status_ignores_cycle_failures(make_bmp):
    src = make_bmp("color.bmp", [[(1, 2, 3)]])
    assert main(["-P", str(src)]) == 0
