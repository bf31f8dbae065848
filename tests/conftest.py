import subprocess
from pathlib import Path

import pytest

from gpuinit.errors import FetchError
from gpuinit.system.apt import AptPackageManager
from gpuinit.system.files import HostFiles
from gpuinit.system.kmod import KernelModules
from gpuinit.system.services import SystemServices
from gpuinit.system.systemd import ServiceManager
from gpuinit.utils.execution import ExecutionContext
from gpuinit.utils.retry import RetryPolicy


NVIDIA_LSPCI = "00:04.0 3D controller: NVIDIA Corporation GV100GL [Tesla V100 SXM2 16GB] (rev a1)\n"
PLAIN_LSPCI = "00:00.0 Host bridge: Intel Corporation 440FX - 82441FX PMC [Natoma] (rev 02)\n"


def host_responses(os_id="Debian", codename="bullseye", lspci=NVIDIA_LSPCI, kernel="5.10.0-26-cloud-amd64"):
    return {
        "lsb_release -is": (0, f"{os_id}\n", ""),
        "lsb_release -cs": (0, f"{codename}\n", ""),
        "lspci": (0, lspci, ""),
        "uname -r": (0, f"{kernel}\n", ""),
    }


class FakeRunner:
    """
    Records every command. Responses are matched by the longest command
    prefix; a value is (rc, stdout, stderr), a list of those consumed in
    order (last one sticks), or a callable(argv) -> tuple.
    """

    def __init__(self, responses=None):
        self.calls = []
        self.responses = dict(responses or {})

    def run(self, cmd, *, mutating=True, cwd=None, env=None):
        argv = [str(c) for c in cmd]
        self.calls.append((argv, mutating))
        line = " ".join(argv)
        resp = None
        for prefix in sorted(self.responses, key=len, reverse=True):
            if line.startswith(prefix):
                resp = self.responses[prefix]
                break
        if resp is None:
            rc, out, err = 0, "", ""
        elif callable(resp):
            rc, out, err = resp(argv)
        elif isinstance(resp, list):
            rc, out, err = resp.pop(0) if len(resp) > 1 else resp[0]
        else:
            rc, out, err = resp
        return subprocess.CompletedProcess(argv, rc, out, err)

    def commands(self):
        return [" ".join(a) for a, _ in self.calls]

    def mutations(self):
        return [" ".join(a) for a, m in self.calls if m]

    def index(self, prefix):
        for i, c in enumerate(self.commands()):
            if c.startswith(prefix):
                return i
        raise AssertionError(f"{prefix!r} never ran; ran: {self.commands()}")


class FakeFetcher:
    def __init__(self, fail_urls=()):
        self.calls = []
        self.fail_urls = set(fail_urls)

    def download(self, url, dest):
        self.calls.append((url, Path(dest)))
        if url in self.fail_urls:
            raise FetchError(url, "connection refused")
        Path(dest).parent.mkdir(parents=True, exist_ok=True)
        Path(dest).write_text(f"# fetched from {url}\n")
        return Path(dest)


def make_system(tmp_path, runner, *, fetcher=None, commands=("lspci", "pip3"), policy=None):
    ctx = ExecutionContext(root=tmp_path / "root")
    policy = policy or RetryPolicy(max_attempts=3, delay=0)
    sleeps = []
    present = set(commands)
    system = SystemServices(
        ctx=ctx,
        policy=policy,
        runner=runner,
        files=HostFiles(ctx),
        apt=AptPackageManager(runner, policy, sleep=sleeps.append),
        fetcher=fetcher or FakeFetcher(),
        services=ServiceManager(runner),
        modules=KernelModules(runner),
        workdir=tmp_path / "work",
        which=lambda name: f"/usr/bin/{name}" if name in present else None,
        sleep=sleeps.append,
    )
    system.sleeps = sleeps
    return system


@pytest.fixture
def root(tmp_path):
    return tmp_path / "root"
