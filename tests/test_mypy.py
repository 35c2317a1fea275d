import pytest
import subprocess


@pytest.mark.extra
def test_mypy():
    """ Type-check the package with mypy """
    res = subprocess.run(['mypy', 'mongoseek'], capture_output=True, text=True)
    if res.returncode != 0:
        raise AssertionError(f'MyPy linting failed:\n{res.stdout}')
