from pathlib import Path
from typing import Optional, Tuple

from antrunner.builder.argument_builder import ArgumentListBuilder
from antrunner.builder.build_file_resolver import BuildFileResolver
from antrunner.builder.console_annotator import AntConsoleAnnotator
from antrunner.builder.windows_command import WindowsCommandStyle, escape_windows_command
from antrunner.common.config.constants import (
    ANT_EXECUTABLE_UNIX,
    ANT_EXECUTABLE_WINDOWS,
    ANT_OPTS_VAR,
    PROPERTY_PREFIX,
    QUICK_LAUNCH_FAILURE_SECONDS,
)
from antrunner.common.config.logging_config import get_step_logger
from antrunner.common.dto.build import AntBuildStep, StepExecutionContext
from antrunner.common.dto.environment import EnvVars
from antrunner.common.dto.installation import AntInstallation
from antrunner.common.exceptions.base_exceptions import AntRunnerException
from antrunner.common.exceptions.build_exceptions import (
    BuildFileNotFoundError,
    ConfigurationError,
    ExecutableNotFoundError,
    LaunchFailure,
    NodeOfflineError,
)
from antrunner.common.utils.text_utils import flatten_line_breaks
from antrunner.common.utils.time_utils import Timer
from antrunner.storage.installation_registry import InstallationRegistry


class AntInvoker:
    """Runs one configured Ant build step.

    ``perform`` returns whether Ant exited with status 0. Configuration
    problems and launch failures raise instead; nothing here retries.
    """

    def __init__(
        self,
        step: AntBuildStep,
        registry: InstallationRegistry,
        resolver: Optional[BuildFileResolver] = None,
        windows_style: Optional[WindowsCommandStyle] = WindowsCommandStyle.SPLIT,
    ):
        self._step = step
        self._registry = registry
        self._resolver = resolver or BuildFileResolver()
        self._windows_style = windows_style

    @property
    def step(self) -> AntBuildStep:
        return self._step

    def get_ant(self) -> Optional[AntInstallation]:
        return self._registry.find(self._step.ant_name)

    async def perform(self, context: StepExecutionContext) -> bool:
        try:
            return await self._perform(context)
        except ConfigurationError as e:
            context.listener.fatal_error(e.message)
            e.with_context(step_id=context.step_id)
            raise
        except AntRunnerException as e:
            e.with_context(step_id=context.step_id)
            raise

    async def _perform(self, context: StepExecutionContext) -> bool:
        node = context.node
        log = get_step_logger(
            context.step_id,
            node_name=node.name if node else None,
            installation=self._step.ant_name,
        )

        if node is None or not node.is_online:
            raise NodeOfflineError(node.name if node else None)

        env = EnvVars(context.environment, sensitive_keys=context.sensitive_variables)
        env.override_all(context.build_variables)

        args = ArgumentListBuilder()

        ai = self.get_ant()
        if ai is None:
            if self._step.ant_name:
                log.warning(f"Ant installation '{self._step.ant_name}' not found, using the default")
            args.add(ANT_EXECUTABLE_UNIX if node.is_unix else ANT_EXECUTABLE_WINDOWS)
        else:
            ai = await ai.for_node(node, context.listener)
            ai = ai.for_environment(env)
            exe = await ai.get_executable(node)
            if exe is None:
                raise ExecutableNotFoundError(ai.name, home=ai.home, node_name=node.name)
            args.add(exe)

        build_file = env.expand(self._step.build_file)
        targets = env.expand(self._step.targets) or ""

        build_file_path = await self._choose_build_file(context, build_file, targets)

        if build_file is not None:
            args.add("-file").add(build_file_path.name)

        sensitive = context.sensitive_variables
        args.add_key_value_pairs(PROPERTY_PREFIX, context.build_variables, sensitive)
        args.add_key_value_pairs_from_property_string(
            PROPERTY_PREFIX, self._step.properties, env, sensitive
        )
        args.add_tokenized(flatten_line_breaks(targets))

        if ai is not None:
            ai.build_env_vars(env)
        if self._step.ant_opts is not None:
            env.put(ANT_OPTS_VAR, env.expand(self._step.ant_opts))

        if not node.is_unix:
            args = escape_windows_command(
                args.to_windows_command(joined=self._windows_style == WindowsCommandStyle.LEGACY_JOINED),
                self._windows_style,
            )

        log.info(f"Launching Ant: {args.to_string_with_masks()}")
        log.debug(f"Environment: {env.masked()}")

        timer = Timer().start()
        try:
            annotator = AntConsoleAnnotator(
                context.listener.stream, context.listener.charset, on_note=context.on_note
            )
            try:
                exit_code = await context.launcher.launch(
                    args.to_list(),
                    env,
                    args.to_mask_array(),
                    build_file_path.parent,
                    annotator,
                )
            finally:
                annotator.force_eol()
        except OSError as e:
            context.listener.display_io_exception(e)
            message = self._launch_failure_message(ai, timer.stop())
            log.error(message)
            raise LaunchFailure(message, command=args.to_masked_list(), cause=e) from e

        log.info(f"Ant exited with code {exit_code} after {timer.elapsed_formatted}")
        return exit_code == 0

    async def _choose_build_file(
        self,
        context: StepExecutionContext,
        build_file: Optional[str],
        targets: str,
    ) -> Path:
        node = context.node

        def _choose() -> Tuple[Path, bool]:
            path = self._resolver.choose(
                context.get_module_root(),
                context.workspace,
                build_file,
                targets,
                exists=node.path_exists,
            )
            return path, node.path_exists(path)

        path, exists = await node.call(_choose)
        if not exists:
            raise BuildFileNotFoundError(str(path))
        return path

    def _launch_failure_message(self, ai: Optional[AntInstallation], elapsed: float) -> str:
        message = "command execution failed."
        if ai is None and elapsed < QUICK_LAUNCH_FAILURE_SECONDS:
            if not self._registry.installations:
                message += " Maybe you need to configure where your Ant installations are?"
            else:
                message += " Maybe you need to configure the job to choose one of your Ant installations?"
        return message
