"""
Test the configuration.
"""

from pytest import raises

from asgispa import Config


def test_config_defaults():
    config = Config.from_env({})
    assert config == Config()
    assert config.root == "."
    assert config.server == "uvicorn"
    assert config.bind == "localhost:8080"
    assert config.log_level == "info"
    assert config.compress_level == 9


def test_config_from_env():
    env = {
        "ASGISPA_ROOT": "/srv/app",
        "ASGISPA_SERVER": "hypercorn",
        "ASGISPA_BIND": "0.0.0.0:80",
        "ASGISPA_LOG_LEVEL": "debug",
        "ASGISPA_COMPRESS_LEVEL": "6",
        "OTHER_VAR": "ignored",
    }
    config = Config.from_env(env)
    assert config.root == "/srv/app"
    assert config.server == "hypercorn"
    assert config.bind == "0.0.0.0:80"
    assert config.log_level == "debug"
    assert config.compress_level == 6

    # Overrides take precedence
    config = Config.from_env(env, server="daphne", compress_level="1")
    assert config.server == "daphne"
    assert config.compress_level == 1
    assert config.root == "/srv/app"


def test_config_to_env():
    config = Config(root="/srv/app", compress_level=3)
    env = config.to_env()
    assert env["ASGISPA_ROOT"] == "/srv/app"
    assert env["ASGISPA_COMPRESS_LEVEL"] == "3"
    assert Config.from_env(env) == config


def test_config_fails():
    with raises(ValueError):
        Config(root="")
    with raises(ValueError):
        Config(server="tornado")
    with raises(ValueError):
        Config(bind="8080")
    with raises(ValueError):
        Config(log_level="loud")
    with raises(ValueError):
        Config(compress_level=10)
    with raises(ValueError):
        Config.from_env({"ASGISPA_COMPRESS_LEVEL": "max"})

    config = Config()
    with raises(AttributeError):
        config.root = "/"


if __name__ == "__main__":
    from common import run_tests

    run_tests(globals())
