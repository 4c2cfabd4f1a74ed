import importlib.util
from pathlib import Path

# Load the example module by file path; examples/ is not a package
repo_root = Path(__file__).resolve().parents[1]
example_path = repo_root / "examples" / "run_quick_example.py"
spec = importlib.util.spec_from_file_location("examples.run_quick_example", str(example_path))
quick_example = importlib.util.module_from_spec(spec)
spec.loader.exec_module(quick_example)


def test_run_quick_example(capsys):
    results = quick_example.main(n_samples=120)

    assert len(results["pdp"]) == 20
    assert results["ice"].values.shape == (120, 20)
    assert results["ice"].values[:, 0].tolist() == [0.0] * 120
    assert results["pair"].values.shape == (20, 20)

    out = capsys.readouterr().out
    assert "Partial dependence of temp" in out
