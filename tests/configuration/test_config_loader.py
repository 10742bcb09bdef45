import pytest

from native_build.config import ConfigLoader, InstallOptions
from native_build.errors import ConfigurationError


def test_default_config_matches_shipped_defaults(config):
    options = config.get_options()

    assert options == InstallOptions()
    assert options.uses_visual_studio is True
    assert config.get_visual_studio_generators() == [
        "Visual Studio 17 2022",
        "Visual Studio 16 2019",
        "Visual Studio 15 2017",
        "Visual Studio 14 2015",
    ]
    assert config.get_windows_toolchain("MinGW") == {
        "build_tool": "mingw32-make.exe",
        "makefile_generator": "MinGW Makefiles",
    }
    assert config.get_windows_toolchain("MSYS2") == {
        "build_tool": "make.exe",
        "makefile_generator": "MSYS Makefiles",
    }
    assert config.get_library_config()["target"] == "_lightgbm"
    assert config.get_environment_config()["package_source"] == "R_PACKAGE_SOURCE"
    assert config.get_option("cleanup_build_dir") is True


def test_unknown_toolchain(config):
    with pytest.raises(ConfigurationError, match="Unknown Windows toolchain"):
        config.get_windows_toolchain("Cygwin")


def test_toolchain_missing_build_tool(tmp_path):
    (tmp_path / "install.yaml").write_text(
        "windows_toolchains:\n"
        "  MinGW:\n"
        "    makefile_generator: MinGW Makefiles\n"
    )
    config = ConfigLoader(tmp_path)

    with pytest.raises(ConfigurationError, match="missing: build_tool"):
        config.get_windows_toolchain("MinGW")


def test_malformed_yaml(tmp_path):
    (tmp_path / "install.yaml").write_text("options: [use_gpu: true\n")

    with pytest.raises(ConfigurationError, match="Could not parse"):
        ConfigLoader(tmp_path)


def test_config_must_be_a_mapping(tmp_path):
    (tmp_path / "install.yaml").write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError, match="must contain a mapping"):
        ConfigLoader(tmp_path)


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigLoader(tmp_path)


def test_custom_config_dir(tmp_path):
    (tmp_path / "install.yaml").write_text(
        "options:\n"
        "  use_gpu: true\n"
        "  make_args: ['-j8']\n"
        "library:\n"
        "  name: mylib\n"
        "visual_studio_generators:\n"
        "  - Visual Studio 17 2022\n"
    )
    config = ConfigLoader(tmp_path)

    options = config.get_options()
    assert options.use_gpu is True
    assert options.make_args == ["-j8"]
    # Unset keys keep their defaults
    library = config.get_library_config()
    assert library["name"] == "mylib"
    assert library["target"] == "_lightgbm"
    assert config.get_visual_studio_generators() == ["Visual Studio 17 2022"]
    assert config.get_option("cleanup_build_dir", True) is True


def test_invalid_options_in_config(tmp_path):
    (tmp_path / "install.yaml").write_text("options:\n  use_cuda: true\n")
    config = ConfigLoader(tmp_path)

    with pytest.raises(ConfigurationError):
        config.get_options()


def test_merge_ignores_none():
    options = InstallOptions(use_gpu=True, make_args=["-j2"])

    merged = options.merge(use_gpu=None, use_msys2=True, make_args=None)

    assert merged.use_gpu is True
    assert merged.use_msys2 is True
    assert merged.make_args == ["-j2"]
    assert merged.uses_visual_studio is False
    assert options.use_msys2 is False


def test_merge_rejects_unknown_option():
    with pytest.raises(ConfigurationError, match="use_cuda"):
        InstallOptions().merge(use_cuda=True)


@pytest.mark.parametrize("mingw,msys2", [(False, False), (True, False), (False, True)])
def test_check_toggles_accepts_single_toolchain(mingw, msys2):
    InstallOptions(use_mingw=mingw, use_msys2=msys2).check_toggles()


def test_check_toggles_rejects_both_toolchains():
    with pytest.raises(ConfigurationError, match="Cannot use both MinGW and MSYS2"):
        InstallOptions(use_mingw=True, use_msys2=True).check_toggles()
