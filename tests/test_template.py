import pytest
from copy import deepcopy
from human_id import generate_id
from common import global_config

# Markers for slow, and nondeterministic tests
slow_test = pytest.mark.slow
nondeterministic_test = pytest.mark.nondeterministic
slow_and_nondeterministic_test = pytest.mark.slow_and_nondeterministic


class TestTemplate:
    @pytest.fixture(autouse=True)
    def setup(self, test_config=None):
        running_on = global_config.running_on

        setup_message = (
            f"🧪 Setting up \033[34m{type(self).__name__}\033[0m "
            f"from {__name__}"
            f" on {running_on} machine..."
        )
        print(setup_message)

        config = deepcopy(
            test_config if test_config is not None else global_config.to_dict()
        )

        # Tag the session so log lines from this test class are easy to find
        config["session_id"] = f"{type(self).__name__}-@-{generate_id()}"
        config["session_name"] = "EvoMeme unit tests"
        config["session_path"] = "/tests"
        config["test"] = True

        for key, value in config.items():
            setattr(self, key, value)

        self.config = config

    @pytest.fixture(scope="session", autouse=True)
    def session_teardown(self, request):
        yield  # This line is important - it allows the tests to run
        print("\n🏁 All tests have completed running.")
