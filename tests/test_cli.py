import pytest

from native_build.main import Installer, main
from native_build.platform import PlatformDetector


@pytest.fixture
def package_env(monkeypatch, package_tree, tmp_path):
    monkeypatch.setenv("R_PACKAGE_SOURCE", str(package_tree))
    monkeypatch.setenv("R_PACKAGE_DIR", str(tmp_path / "site-library" / "lightgbm"))
    monkeypatch.setenv("SHLIB_EXT", ".so")
    monkeypatch.setenv("R_VERSION", "4.3.1")
    monkeypatch.delenv("R_ARCH", raising=False)
    monkeypatch.setattr(PlatformDetector, "detect_runtime_pointer_bits",
                        lambda self, command, home=None: 64)
    return package_tree


def _exit_code(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def test_plan_on_linux(package_env, capsys):
    assert _exit_code(["plan", "--platform", "linux", "--use-gpu", "--make-arg", "-j4"]) == 0

    out = capsys.readouterr().out
    assert "-DCMAKE_R_VERSION=4.3.1" in out
    assert "-DUSE_GPU=ON" in out
    assert "Build command: make _lightgbm -j4" in out


def test_plan_on_windows_lists_generators(package_env, capsys):
    assert _exit_code(["plan", "--platform", "windows"]) == 0

    out = capsys.readouterr().out
    assert "Visual Studio 17 2022" in out
    assert "Fallback toolchain: MSYS2" in out
    assert "Build command: make.exe _lightgbm" in out


def test_plan_with_conflicting_toggles_fails(package_env):
    assert _exit_code(["plan", "--use-mingw", "--use-msys2"]) == 1


def test_dry_run_install(package_env):
    assert _exit_code(["install", "--platform", "linux", "--dry-run"]) == 0

    # Staging happens for real; nothing is compiled or copied
    assert (package_env / "src" / "CMakeLists.txt").exists()
    assert not (package_env / "src" / "build").exists()


def test_install_without_package_source_fails(package_env, monkeypatch):
    monkeypatch.delenv("R_PACKAGE_SOURCE")
    assert _exit_code(["install", "--platform", "linux", "--dry-run"]) == 1


def test_package_source_flag_overrides_environment(package_env, monkeypatch):
    monkeypatch.setenv("R_PACKAGE_SOURCE", "/does/not/exist")
    argv = ["install", "--platform", "linux", "--dry-run", "--package-source", str(package_env)]
    assert _exit_code(argv) == 0


def test_info(package_env, capsys):
    assert _exit_code(["info", "--platform", "linux"]) == 0

    out = capsys.readouterr().out
    assert "Runtime version: 4.3.1" in out
    assert "Library extension: .so" in out


def test_installer_uses_makefile_toolchain_on_windows(package_env, monkeypatch, recording_runner):
    def responder(cmd, cwd):
        if cmd[0] == "mingw32-make.exe":
            (cwd.parent / "lightgbm.dll").write_bytes(b"MZ")
        return 0

    monkeypatch.setenv("SHLIB_EXT", ".dll")
    installer = Installer(platform="windows", use_mingw=True)
    installer.runner = recording_runner(responder)

    result = installer.install()

    assert result.generator == "MinGW Makefiles"
    assert result.library.name == "lightgbm.dll"
    assert result.library.exists()
    assert not (package_env / "src" / "build").exists()


def test_installer_rejects_unknown_platform():
    with pytest.raises(ValueError, match="Unsupported platform"):
        Installer(platform="solaris")


def test_install_into_32_bit_runtime_fails(package_env, monkeypatch):
    monkeypatch.setattr(PlatformDetector, "detect_runtime_pointer_bits",
                        lambda self, command, home=None: 32)
    assert _exit_code(["install", "--platform", "linux", "--dry-run"]) == 1
    assert not (package_env / "src" / "CMakeLists.txt").exists()


def test_install_into_32_bit_sub_architecture_fails(package_env):
    argv = ["install", "--platform", "windows", "--dry-run", "--arch-suffix", "/i386"]
    assert _exit_code(argv) == 1


def test_runtime_home_is_passed_to_version_query(package_env, monkeypatch, tmp_path):
    seen = {}

    def fake_detect(self, env_value, command=None, home=None):
        seen["home"] = home
        return ("4", "3.1")

    monkeypatch.setattr(PlatformDetector, "detect_runtime_version", fake_detect)
    monkeypatch.setenv("R_HOME", str(tmp_path / "R"))

    assert _exit_code(["plan", "--platform", "linux"]) == 0
    assert seen["home"] == str(tmp_path / "R")


def test_malformed_config_dir_fails(package_env, tmp_path):
    config_dir = tmp_path / "broken"
    config_dir.mkdir()
    (config_dir / "install.yaml").write_text("options: [use_gpu\n")

    assert _exit_code(["plan", "--config-dir", str(config_dir)]) == 1
