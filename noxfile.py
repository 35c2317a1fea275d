import nox.sessions

# Nox
nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = [
    'tests',
    'tests_pymongo',
    'tests_fastapi',
]

# Versions
PYTHON_VERSIONS = ['3.9', '3.10', '3.11', '3.12']
PYMONGO_VERSIONS = [
    # Selective: major releases
    # NOTE: keep major versions with breaking changes. Skip versions with minor bugfix changes.
    '3.13.0',
    '4.0.2', '4.3.3', '4.6.3', '4.8.0',
]
FASTAPI_VERSIONS = [
    '0.70.1', '0.79.0', '0.88.0', '0.95.2', '0.100.1', '0.110.3',
]


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.sessions.Session, *, overrides: dict[str, str] = {}):
    """ Run all tests """
    # This approach works better locally: install from requirements.txt
    session.install(*requirements_txt, '.')

    if overrides:
        session.install(*(f'{name}=={version}' for name, version in overrides.items()))

    # Test
    args = ['-m', 'not extra']
    if not overrides:
        args.append('--cov=mongoseek')

    session.run('pytest', 'tests/', *args)


@nox.session(python=PYTHON_VERSIONS[-1])
@nox.parametrize('pymongo', PYMONGO_VERSIONS)
def tests_pymongo(session: nox.sessions.Session, pymongo):
    """ Test against a specific PyMongo version """
    tests(session, overrides={'pymongo': pymongo})


@nox.session(python=PYTHON_VERSIONS[-1])
@nox.parametrize('fastapi', FASTAPI_VERSIONS)
def tests_fastapi(session: nox.sessions.Session, fastapi):
    """ Test against a specific FastAPI version """
    tests(session, overrides={'fastapi': fastapi})



# Get requirements.txt from poetry
import tempfile, subprocess
with tempfile.NamedTemporaryFile('w+') as f:
    subprocess.run(f'poetry export --no-interaction --dev --format requirements.txt --without-hashes --output={f.name}', shell=True, check=True)
    f.seek(0)
    requirements_txt = [line.split(';', 1)[0] for line in f.readlines()]  # after ";" go some Python version specifiers
