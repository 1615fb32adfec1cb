import logging

import pytest

from antrunner.builder.ant_invoker import AntInvoker
from antrunner.builder.windows_command import WindowsCommandStyle
from antrunner.common.config.constants import NoteKind
from antrunner.common.dto.build import AntBuildStep
from antrunner.common.dto.installation import AntInstallation
from antrunner.common.exceptions import (
    BuildFileNotFoundError,
    ExecutableNotFoundError,
    LaunchFailure,
    NodeOfflineError,
    WorkspaceUnavailableError,
)

from tests.conftest import FakeNode, RecordingLauncher


def _opt_ant_node(tmp_path, unix=True):
    exe = "/opt/ant/bin/ant" if unix else "C:\\ant\\bin\\ant.bat"
    return FakeNode(existing=[exe], tools_root=tmp_path / "tools", environment={}, unix=unix)


class TestExecutableSelection:
    @pytest.mark.asyncio
    async def test_unresolved_installation_uses_bare_ant(self, make_context, registry):
        launcher = RecordingLauncher()
        step = AntBuildStep(targets="compile", ant_name="missing")

        assert await AntInvoker(step, registry).perform(make_context(launcher)) is True

        call = launcher.calls[0]
        assert call.cmds == ["ant", "compile"]
        assert "ANT_HOME" not in call.env

    @pytest.mark.asyncio
    async def test_resolved_installation_sets_ant_home(self, make_context, registry, tmp_path):
        registry.set_installations(AntInstallation(name="ant-1.10", home="/opt/ant/"))
        launcher = RecordingLauncher()
        step = AntBuildStep(targets="dist", ant_name="ant-1.10")

        await AntInvoker(step, registry).perform(make_context(launcher, node=_opt_ant_node(tmp_path)))

        call = launcher.calls[0]
        assert call.cmds == ["/opt/ant/bin/ant", "dist"]
        assert call.env["ANT_HOME"] == "/opt/ant"

    @pytest.mark.asyncio
    async def test_installation_home_expanded_from_environment(self, make_context, registry, tmp_path):
        registry.set_installations(AntInstallation(name="ant", home="${TOOLS}/ant"))
        launcher = RecordingLauncher()
        context = make_context(
            launcher,
            node=_opt_ant_node(tmp_path),
            environment={"PATH": "/usr/bin", "TOOLS": "/opt"},
        )

        await AntInvoker(AntBuildStep(ant_name="ant"), registry).perform(context)

        assert launcher.calls[0].cmds[0] == "/opt/ant/bin/ant"
        assert launcher.calls[0].env["ANT_HOME"] == "/opt/ant"

    @pytest.mark.asyncio
    async def test_missing_executable_aborts(self, make_context, registry, tmp_path):
        registry.set_installations(AntInstallation(name="broken", home=str(tmp_path)))
        launcher = RecordingLauncher()

        with pytest.raises(ExecutableNotFoundError) as exc_info:
            await AntInvoker(AntBuildStep(ant_name="broken"), registry).perform(make_context(launcher))

        assert exc_info.value.message == 'Cannot find executable from the chosen Ant installation "broken"'
        assert launcher.calls == []


class TestExitStatus:
    @pytest.mark.asyncio
    async def test_zero_exit_is_success(self, make_context, registry):
        launcher = RecordingLauncher(exit_code=0)
        assert await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher)) is True

    @pytest.mark.asyncio
    async def test_non_zero_exit_is_failure(self, make_context, registry):
        launcher = RecordingLauncher(exit_code=1)
        assert await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher)) is False


class TestBuildFile:
    @pytest.mark.asyncio
    async def test_missing_build_file_never_launches(self, make_context, registry, workspace):
        (workspace / "build.xml").unlink()
        launcher = RecordingLauncher()

        with pytest.raises(BuildFileNotFoundError) as exc_info:
            await AntInvoker(AntBuildStep(targets="all"), registry).perform(make_context(launcher))

        assert exc_info.value.message.startswith("Unable to find build script at")
        assert exc_info.value.details["step_id"] == "step-1"
        assert launcher.calls == []

    @pytest.mark.asyncio
    async def test_missing_build_file_reported_in_build_log(self, make_context, registry, workspace, log_stream):
        (workspace / "build.xml").unlink()

        with pytest.raises(BuildFileNotFoundError):
            await AntInvoker(AntBuildStep(), registry).perform(make_context(RecordingLauncher()))

        assert log_stream.getvalue().startswith(b"FATAL: Unable to find build script at")

    @pytest.mark.asyncio
    async def test_default_build_file_has_no_file_flag(self, make_context, registry, workspace):
        launcher = RecordingLauncher()
        await AntInvoker(AntBuildStep(targets="all"), registry).perform(make_context(launcher))

        call = launcher.calls[0]
        assert "-file" not in call.cmds
        assert call.pwd == workspace

    @pytest.mark.asyncio
    async def test_configured_build_file(self, make_context, registry, workspace):
        (workspace / "sub").mkdir()
        (workspace / "sub" / "ci.xml").touch()
        launcher = RecordingLauncher()
        step = AntBuildStep(targets="all", build_file="sub/ci.xml")

        await AntInvoker(step, registry).perform(make_context(launcher))

        call = launcher.calls[0]
        assert call.cmds == ["ant", "-file", "ci.xml", "all"]
        assert call.pwd == workspace / "sub"

    @pytest.mark.asyncio
    async def test_build_file_from_targets(self, make_context, registry, workspace):
        (workspace / "custom.xml").touch()
        (workspace / "build.xml").unlink()
        launcher = RecordingLauncher()
        step = AntBuildStep(targets="-f custom.xml -DkeyA=1")

        await AntInvoker(step, registry).perform(make_context(launcher))

        assert launcher.calls[0].cmds == ["ant", "-f", "custom.xml", "-DkeyA=1"]

    @pytest.mark.asyncio
    async def test_module_root_falls_back_to_workspace(self, make_context, registry, workspace):
        module = workspace / "module"
        module.mkdir()
        launcher = RecordingLauncher()

        await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher, module_root=module))

        assert launcher.calls[0].pwd == workspace

    @pytest.mark.asyncio
    async def test_module_root_preferred(self, make_context, registry, workspace):
        module = workspace / "module"
        module.mkdir()
        (module / "build.xml").touch()
        launcher = RecordingLauncher()

        await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher, module_root=module))

        assert launcher.calls[0].pwd == module

    @pytest.mark.asyncio
    async def test_build_file_expanded_from_build_variables(self, make_context, registry, workspace):
        (workspace / "release.xml").touch()
        launcher = RecordingLauncher()
        step = AntBuildStep(build_file="${FLAVOR}.xml")

        await AntInvoker(step, registry).perform(
            make_context(launcher, build_variables={"FLAVOR": "release"})
        )

        assert launcher.calls[0].cmds[1:3] == ["-file", "release.xml"]

    @pytest.mark.asyncio
    async def test_workspace_unavailable(self, make_context, registry):
        launcher = RecordingLauncher()
        with pytest.raises(WorkspaceUnavailableError):
            await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher, workspace=None))
        assert launcher.calls == []


class TestArguments:
    @pytest.mark.asyncio
    async def test_properties_and_masks(self, make_context, registry):
        launcher = RecordingLauncher()
        step = AntBuildStep(targets="clean\n\tdist", properties="a=1\nwho=${user}")
        context = make_context(
            launcher,
            build_variables={"user": "bob", "token": "s3cret"},
            sensitive_variables={"token"},
        )

        await AntInvoker(step, registry).perform(context)

        call = launcher.calls[0]
        assert call.cmds == ["ant", "-Duser=bob", "-Dtoken=s3cret", "-Da=1", "-Dwho=bob", "clean", "dist"]
        assert call.masks == [False, False, True, False, False, False, False]

    @pytest.mark.asyncio
    async def test_ant_opts_expanded(self, make_context, registry):
        launcher = RecordingLauncher()
        step = AntBuildStep(ant_opts="-Xmx${MEM}")

        await AntInvoker(step, registry).perform(
            make_context(launcher, environment={"MEM": "512m"})
        )

        assert launcher.calls[0].env["ANT_OPTS"] == "-Xmx512m"

    @pytest.mark.asyncio
    async def test_build_variables_override_environment(self, make_context, registry):
        launcher = RecordingLauncher()
        context = make_context(
            launcher,
            environment={"PATH": "/usr/bin", "MODE": "debug"},
            build_variables={"MODE": "release"},
        )

        await AntInvoker(AntBuildStep(), registry).perform(context)

        assert launcher.calls[0].env["MODE"] == "release"


class TestWindows:
    @pytest.mark.asyncio
    async def test_split_command_quotes_empty_properties(self, make_context, registry, tmp_path):
        launcher = RecordingLauncher()
        node = FakeNode(tools_root=tmp_path / "tools", environment={}, unix=False)
        context = make_context(launcher, node=node, build_variables={"foo": "", "pw": "x"},
                               sensitive_variables={"pw"})

        await AntInvoker(AntBuildStep(targets="all"), registry).perform(context)

        call = launcher.calls[0]
        assert call.cmds == [
            "cmd.exe", "/C", '"ant.bat', '-Dfoo=""', "-Dpw=x", "all",
            "&&", "exit", '%%ERRORLEVEL%%"',
        ]
        assert call.masks == [False, False, False, False, True, False, False, False, False]

    @pytest.mark.asyncio
    async def test_legacy_joined_command(self, make_context, registry, tmp_path):
        launcher = RecordingLauncher()
        node = FakeNode(tools_root=tmp_path / "tools", environment={}, unix=False)
        context = make_context(launcher, node=node, build_variables={"foo": ""})
        invoker = AntInvoker(
            AntBuildStep(targets="all"), registry, windows_style=WindowsCommandStyle.LEGACY_JOINED
        )

        await invoker.perform(context)

        assert launcher.calls[0].cmds == [
            "cmd.exe", "/C", '"ant.bat -Dfoo="" all && exit %%ERRORLEVEL%%"',
        ]

    @pytest.mark.asyncio
    async def test_detected_style_re_escapes_after_shell_prefix(self, make_context, registry, tmp_path):
        launcher = RecordingLauncher()
        node = FakeNode(tools_root=tmp_path / "tools", environment={}, unix=False)
        context = make_context(launcher, node=node, build_variables={"foo": ""})

        await AntInvoker(AntBuildStep(targets="all"), registry, windows_style=None).perform(context)

        assert launcher.calls[0].cmds[:4] == ["cmd.exe", "/C", '"ant.bat', '-Dfoo=""']

    @pytest.mark.asyncio
    async def test_windows_installation_executable(self, make_context, registry, tmp_path):
        registry.set_installations(AntInstallation(name="ant", home="C:\\ant\\"))
        launcher = RecordingLauncher()
        context = make_context(launcher, node=_opt_ant_node(tmp_path, unix=False))

        await AntInvoker(AntBuildStep(ant_name="ant"), registry).perform(context)

        call = launcher.calls[0]
        assert call.cmds[:3] == ["cmd.exe", "/C", '"C:\\ant\\bin\\ant.bat']
        assert call.env["ANT_HOME"] == "C:\\ant"


class TestFailures:
    @pytest.mark.asyncio
    async def test_offline_node(self, make_context, registry, tmp_path):
        launcher = RecordingLauncher()
        node = FakeNode(tools_root=tmp_path, environment={}, online=False)
        with pytest.raises(NodeOfflineError):
            await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher, node=node))
        assert launcher.calls == []

    @pytest.mark.asyncio
    async def test_no_node(self, make_context, registry):
        launcher = RecordingLauncher()
        context = make_context(launcher)
        context.node = None
        with pytest.raises(NodeOfflineError):
            await AntInvoker(AntBuildStep(), registry).perform(context)

    @pytest.mark.asyncio
    async def test_launch_failure_without_installations(self, make_context, registry, log_stream):
        launcher = RecordingLauncher(error=FileNotFoundError(2, "No such file or directory", "ant"))

        with pytest.raises(LaunchFailure) as exc_info:
            await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher))

        assert "Maybe you need to configure where your Ant installations are?" in exc_info.value.message
        assert b"FileNotFoundError" in log_stream.getvalue()

    @pytest.mark.asyncio
    async def test_launch_failure_with_unselected_installation(self, make_context, registry):
        registry.set_installations(AntInstallation(name="ant-1.10", home="/opt/ant"))
        launcher = RecordingLauncher(error=PermissionError(13, "Permission denied"))

        with pytest.raises(LaunchFailure) as exc_info:
            await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher))

        assert "choose one of your Ant installations?" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_launch_failure_masks_command(self, make_context, registry):
        launcher = RecordingLauncher(error=FileNotFoundError(2, "No such file or directory"))
        context = make_context(launcher, build_variables={"pw": "x"}, sensitive_variables={"pw"})

        with pytest.raises(LaunchFailure) as exc_info:
            await AntInvoker(AntBuildStep(), registry).perform(context)

        assert exc_info.value.command == ["ant", "******"]


@pytest.mark.asyncio
async def test_output_reaches_build_log_unchanged(make_context, registry, log_stream):
    output = b"\ncompile:\n    [javac] Compiling 1 source file\n\nBUILD SUCCESSFUL"
    launcher = RecordingLauncher(output=output)

    await AntInvoker(AntBuildStep(), registry).perform(make_context(launcher))

    assert log_stream.getvalue() == output


@pytest.mark.asyncio
async def test_notes_reach_step_callback(make_context, registry):
    output = b"\ncompile:\n    [javac] Compiling 1 source file\n\nBUILD SUCCESSFUL\n"
    notes = []
    context = make_context(RecordingLauncher(output=output), on_note=notes.append)

    await AntInvoker(AntBuildStep(), registry).perform(context)

    assert [(n.kind, n.name) for n in notes] == [
        (NoteKind.TARGET, "compile"),
        (NoteKind.TASK, "javac"),
        (NoteKind.OUTCOME, "SUCCESSFUL"),
    ]


@pytest.mark.asyncio
async def test_unbalanced_quote_in_targets(make_context, registry):
    launcher = RecordingLauncher()

    await AntInvoker(AntBuildStep(targets="compile -Dmsg=don't"), registry).perform(make_context(launcher))

    assert launcher.calls[0].cmds == ["ant", "compile", "-Dmsg=dont"]


@pytest.mark.asyncio
async def test_environment_logged_with_sensitive_values_masked(make_context, registry):
    records = []
    handler = logging.Handler()
    handler.emit = records.append
    target = logging.getLogger("antrunner.step")
    previous_level = target.level
    target.addHandler(handler)
    target.setLevel(logging.DEBUG)
    context = make_context(RecordingLauncher(), build_variables={"token": "s3cret"}, sensitive_variables={"token"})
    try:
        await AntInvoker(AntBuildStep(), registry).perform(context)
    finally:
        target.removeHandler(handler)
        target.setLevel(previous_level)

    env_lines = [r.getMessage() for r in records if r.getMessage().startswith("Environment:")]
    assert len(env_lines) == 1
    assert "s3cret" not in env_lines[0]
    assert "'token': '******'" in env_lines[0]
