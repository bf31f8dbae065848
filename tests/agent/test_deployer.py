import pytest

from gpuinit.agent.deployer import AgentDeployer, AgentLayout, render_unit
from gpuinit.config.models import ProvisionConfig
from gpuinit.errors import AgentDeployError

from conftest import FakeFetcher, FakeRunner, make_system

CFG = ProvisionConfig(install_agent=True, agent_source_url="https://agent.test/repo/")


def test_unit_file_fields():
    unit = render_unit(AgentLayout())
    for line in (
        "Description=GPU Utilization Metric Agent",
        "Type=simple",
        "ExecStart=/bin/bash --login -c 'python3 \"/opt/gpu-utilization-agent/report_gpu_metrics.py\"'",
        "User=root",
        "Group=root",
        "WorkingDirectory=/",
        "Restart=always",
        "WantedBy=multi-user.target",
    ):
        assert line in unit.splitlines()


def test_deploy_happy_path(tmp_path):
    runner, fetcher = FakeRunner(), FakeFetcher()
    system = make_system(tmp_path, runner, fetcher=fetcher)

    AgentDeployer(system).deploy(CFG)

    assert [u for u, _ in fetcher.calls] == [
        "https://agent.test/repo/requirements.txt",
        "https://agent.test/repo/report_gpu_metrics.py",
    ]
    install_dir = system.files.path("/opt/gpu-utilization-agent")
    assert runner.commands() == [
        f"pip3 install -r {install_dir / 'requirements.txt'}",
        "systemctl daemon-reload",
        "systemctl --now enable gpu-utilization-agent.service",
    ]
    unit = system.files.read_text("/lib/systemd/system/gpu-utilization-agent.service")
    assert "Restart=always" in unit


def test_pip_is_installed_when_missing(tmp_path):
    runner = FakeRunner()
    system = make_system(tmp_path, runner, commands=("lspci",))
    AgentDeployer(system).deploy(CFG)
    assert runner.commands()[0] == "apt-get install -y -q python3-pip"


def test_requirements_failure_is_agent_error(tmp_path):
    runner = FakeRunner({"pip3 install": (1, "", "No matching distribution")})
    system = make_system(tmp_path, runner)

    with pytest.raises(AgentDeployError) as ei:
        AgentDeployer(system).deploy(CFG)

    assert ei.value.step == "install agent requirements"
    assert runner.commands().count(
        f"pip3 install -r {system.files.path('/opt/gpu-utilization-agent/requirements.txt')}"
    ) == 3
    assert not any(c.startswith("systemctl") for c in runner.commands())


def test_download_failure_is_agent_error(tmp_path):
    fetcher = FakeFetcher(fail_urls={"https://agent.test/repo/report_gpu_metrics.py"})
    system = make_system(tmp_path, FakeRunner(), fetcher=fetcher)
    with pytest.raises(AgentDeployError) as ei:
        AgentDeployer(system).deploy(CFG)
    assert ei.value.step == "download agent"


def test_enable_failure_is_agent_error(tmp_path):
    runner = FakeRunner({"systemctl --now enable": (1, "", "unit masked")})
    system = make_system(tmp_path, runner)
    with pytest.raises(AgentDeployError, match="enable service"):
        AgentDeployer(system).deploy(CFG)


def test_unwritable_unit_directory_is_agent_error(tmp_path):
    system = make_system(tmp_path, FakeRunner())
    system.files.path("/lib").parent.mkdir(parents=True, exist_ok=True)
    system.files.path("/lib").write_text("not a directory")

    with pytest.raises(AgentDeployError) as ei:
        AgentDeployer(system).deploy(CFG)
    assert ei.value.step == "write service unit"


def test_raw_os_error_is_agent_error(tmp_path):
    class DiskFullFetcher(FakeFetcher):
        def download(self, url, dest):
            raise OSError(28, "No space left on device")

    system = make_system(tmp_path, FakeRunner(), fetcher=DiskFullFetcher())
    with pytest.raises(AgentDeployError, match="No space left"):
        AgentDeployer(system).deploy(CFG)
