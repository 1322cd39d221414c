import pytest

from katago_bridge.cli.prompt import choose_variant, fixed_variant
from katago_bridge.errors import UnsupportedPlatformError
from katago_bridge.platforms import Variant, resolve_profile


class TestResolveProfile:
    def test_linux(self):
        profile = resolve_profile("v1.13.0", system="Linux")

        assert profile.binary_name == "katago"
        assert profile.archive_for(Variant.GPU) == "katago-v1.13.0-opencl-linux-x64.zip"
        assert profile.archive_for(Variant.CPU) == "katago-v1.13.0-eigenavx2-linux-x64.zip"

    def test_windows(self):
        profile = resolve_profile("v1.13.0", system="Windows")

        assert profile.binary_name == "katago.exe"
        assert profile.archive_for(Variant.GPU) == "katago-v1.13.0-opencl-windows-x64.zip"

    def test_version_is_used_in_archive_names(self):
        profile = resolve_profile("v1.14.1", system="Linux")

        assert profile.archive_for(Variant.CPU) == "katago-v1.14.1-eigenavx2-linux-x64.zip"

    def test_unsupported_system(self):
        with pytest.raises(UnsupportedPlatformError) as exc_info:
            resolve_profile("v1.13.0", system="Plan9")

        assert "Plan9" in exc_info.value.message


class TestVariant:
    @pytest.mark.parametrize("value,expected", [("gpu", Variant.GPU), (" CPU ", Variant.CPU)])
    def test_parse(self, value, expected):
        assert Variant.parse(value) is expected

    def test_parse_invalid(self):
        with pytest.raises(ValueError, match="unknown variant"):
            Variant.parse("tpu")


class TestChooseVariant:
    """交互式选择"""

    def _run(self, answers, **kwargs):
        answers = iter(answers)
        output = []
        result = choose_variant(lambda prompt: next(answers), output.append, **kwargs)
        return result, output

    def test_first_answer_valid(self):
        result, output = self._run(["1"])

        assert result is Variant.GPU
        assert output[0] == "Choose KataGo version:"
        assert output[-1] == "Using GPU (OpenCL) KataGo version."

    def test_reprompts_until_valid(self):
        result, output = self._run(["", "7", "abc", "2"])

        assert result is Variant.CPU
        assert output.count("Invalid choice. Please enter 1 or 2.") == 3

    def test_accepts_names(self):
        result, _ = self._run(["cpu"])

        assert result is Variant.CPU

    def test_max_attempts(self):
        with pytest.raises(ValueError):
            self._run(["x", "y", "z"], max_attempts=2)

    def test_eof_propagates(self):
        def closed(prompt):
            raise EOFError

        with pytest.raises(EOFError):
            choose_variant(closed, lambda line: None)

    def test_many_invalid_answers_do_not_recurse(self):
        result, _ = self._run(["bad"] * 5000 + ["1"])

        assert result is Variant.GPU

    def test_fixed_variant(self):
        assert fixed_variant(Variant.CPU)() is Variant.CPU
