import pytest

from gpuinit.config.models import ProvisionConfig
from gpuinit.drivers.os_driver import ENVIRONMENT_FILE, NVBLAS_CONFIG_FILE, OsDriverStrategy
from gpuinit.drivers.registry import strategy_for
from gpuinit.drivers.nvidia import VendorDriverStrategy
from gpuinit.errors import ExhaustedRetryError, ModuleLoadError, UnsupportedOSError, UnsupportedProviderError
from gpuinit.host.models import HostProfile, OsFamily

from conftest import FakeRunner, make_system

DEBIAN = HostProfile(OsFamily.DEBIAN, "bullseye", True, os_id="debian")
UBUNTU = HostProfile(OsFamily.UBUNTU, "bionic", True, os_id="ubuntu")


def _modprobe_calls(runner):
    return [c for c in runner.commands() if c.startswith("modprobe")]


def test_debian_full_sequence(tmp_path):
    runner = FakeRunner()
    system = make_system(tmp_path, runner)

    OsDriverStrategy(system).install_driver(DEBIAN, ProvisionConfig())

    cmds = runner.commands()
    assert cmds[0] == "apt-get update"
    assert cmds[1] == (
        "apt-get install -y -q -t bullseye-backports --no-install-recommends "
        "nvidia-cuda-toolkit nvidia-driver nvidia-kernel-common nvidia-smi"
    )
    assert _modprobe_calls(runner) == [
        "modprobe -r nouveau",
        "modprobe nvidia-drm",
        "modprobe nvidia-uvm",
        "modprobe drm",
        "modprobe nvidia-current",
    ]
    conf = system.files.read_text(NVBLAS_CONFIG_FILE)
    assert "NVBLAS_CPU_BLAS_LIB /usr/lib/libblas.so" in conf
    assert "NVBLAS_GPU_LIST ALL" in conf
    assert "NVBLAS_CONFIG_FILE=/etc/nvidia/nvblas.conf" in system.files.read_text(ENVIRONMENT_FILE)


def test_ubuntu_skips_repository_refresh(tmp_path):
    runner = FakeRunner()
    system = make_system(tmp_path, runner)

    OsDriverStrategy(system).install_driver(UBUNTU, ProvisionConfig(ubuntu_driver_version="435"))

    assert runner.commands()[0] == (
        "apt-get install -y -q -t bionic-backports --no-install-recommends "
        "nvidia-cuda-toolkit nvidia-driver-435 nvidia-kernel-common-435"
    )
    assert "apt-get update" not in runner.commands()
    assert _modprobe_calls(runner)[-1] == "modprobe nvidia"
    conf = system.files.read_text(NVBLAS_CONFIG_FILE)
    assert "NVBLAS_CPU_BLAS_LIB /usr/lib/x86_64-linux-gnu/libblas.so" in conf


@pytest.mark.parametrize("host", [DEBIAN, UBUNTU], ids=["debian", "ubuntu"])
@pytest.mark.parametrize("driver_version", ["435", "470", "535"])
def test_nouveau_removed_strictly_before_any_load(tmp_path, host, driver_version):
    runner = FakeRunner()
    system = make_system(tmp_path, runner)
    OsDriverStrategy(system).install_driver(host, ProvisionConfig(ubuntu_driver_version=driver_version))

    calls = _modprobe_calls(runner)
    unload = calls.index("modprobe -r nouveau")
    loads = [i for i, c in enumerate(calls) if not c.startswith("modprobe -r")]
    assert loads and all(unload < i for i in loads)


def test_nouveau_absent_is_tolerated(tmp_path):
    runner = FakeRunner({"modprobe -r nouveau": (1, "", "Module nouveau not found")})
    system = make_system(tmp_path, runner)
    OsDriverStrategy(system).install_driver(DEBIAN, ProvisionConfig())
    assert "modprobe nvidia-current" in runner.commands()


def test_module_load_failure_is_fatal(tmp_path):
    runner = FakeRunner({"modprobe nvidia-uvm": (1, "", "")})
    system = make_system(tmp_path, runner)
    with pytest.raises(ModuleLoadError) as ei:
        OsDriverStrategy(system).install_driver(DEBIAN, ProvisionConfig())
    assert ei.value.module == "nvidia-uvm"
    assert "modprobe drm" not in runner.commands()


def test_package_install_exhausted_stops_before_config(tmp_path):
    runner = FakeRunner({"apt-get install": (100, "", "")})
    system = make_system(tmp_path, runner)
    with pytest.raises(ExhaustedRetryError):
        OsDriverStrategy(system).install_driver(UBUNTU, ProvisionConfig())
    assert not system.files.exists(NVBLAS_CONFIG_FILE)
    assert _modprobe_calls(runner) == []


def test_active_node_manager_is_killed(tmp_path):
    runner = FakeRunner({"systemctl is-active": (0, "", "")})
    system = make_system(tmp_path, runner)
    OsDriverStrategy(system).install_driver(DEBIAN, ProvisionConfig())
    assert runner.commands()[-1] == "systemctl kill -s KILL hadoop-yarn-nodemanager"


@pytest.mark.parametrize("rc", [3, 4])
def test_inactive_or_unknown_node_manager_is_left_alone(tmp_path, rc):
    runner = FakeRunner({"systemctl is-active": (rc, "", "")})
    system = make_system(tmp_path, runner)
    OsDriverStrategy(system).install_driver(DEBIAN, ProvisionConfig())
    assert not any(c.startswith("systemctl kill") for c in runner.commands())


def test_rerun_does_not_duplicate_artifacts(tmp_path):
    runner = FakeRunner()
    system = make_system(tmp_path, runner)
    for _ in range(2):
        OsDriverStrategy(system).install_driver(DEBIAN, ProvisionConfig())

    env = system.files.read_text(ENVIRONMENT_FILE)
    assert env.count("NVBLAS_CONFIG_FILE=") == 1
    assert system.files.read_text(NVBLAS_CONFIG_FILE).count("NVBLAS_GPU_LIST ALL") == 1


def test_refuses_unsupported_os_without_mutation(tmp_path):
    runner = FakeRunner()
    system = make_system(tmp_path, runner)
    with pytest.raises(UnsupportedOSError):
        OsDriverStrategy(system).install_driver(HostProfile(OsFamily.UNSUPPORTED, "", True), ProvisionConfig())
    assert runner.calls == []
    assert not (tmp_path / "root").exists()


def test_strategy_registry(tmp_path):
    system = make_system(tmp_path, FakeRunner())
    assert isinstance(strategy_for("OS", system), OsDriverStrategy)
    assert isinstance(strategy_for("NVIDIA", system), VendorDriverStrategy)
    for bad in ("AMD", "os", ""):
        with pytest.raises(UnsupportedProviderError):
            strategy_for(bad, system)
