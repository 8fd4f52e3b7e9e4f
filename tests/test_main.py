from isomesh.main import main

TWO_LAYER_TEXT = "2\n0 0 0 0\n1 1 1 1\n"


def test_reports_surface(write_volume, capsys):
    path = write_volume(TWO_LAYER_TEXT)

    assert main([path, '--isovalue', '0.5']) == 0
    out = capsys.readouterr().out
    assert "Faces: 2" in out
    assert "Vertices: 4" in out


def test_relative_isovalue(write_volume, capsys):
    path = write_volume("2\n0 0 0 0\n10 10 10 10\n")

    assert main([path, '--relative', '0.5', '--cell-size', '1']) == 0
    assert "Isovalue: 5" in capsys.readouterr().out


def test_empty_surface_is_not_an_error(write_volume, capsys):
    path = write_volume(TWO_LAYER_TEXT)

    assert main([path, '--isovalue', '5']) == 0
    assert "No surface" in capsys.readouterr().out


def test_missing_file_fails(tmp_path, capsys):
    assert main([str(tmp_path / "absent.txt")]) == 1
    assert "file not found" in capsys.readouterr().err


def test_malformed_file_fails(write_volume, capsys):
    path = write_volume("3\n1 2 3\n")

    assert main([path]) == 1
    assert "malformed volume" in capsys.readouterr().err
