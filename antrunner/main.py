import argparse
import asyncio
import os
import sys
import uuid
from pathlib import Path
from typing import List, Optional

from antrunner.builder.ant_invoker import AntInvoker
from antrunner.builder.launcher import LocalLauncher
from antrunner.builder.listener import BuildListener
from antrunner.common.config.settings import get_settings
from antrunner.common.config.logging_config import setup_logging, get_logger
from antrunner.common.dto.build import AntBuildStep, StepExecutionContext
from antrunner.common.dto.installation import (
    AntInstallation,
    AntInstallerSpec,
    InstallSourceProperty,
)
from antrunner.common.exceptions.base_exceptions import AntRunnerException
from antrunner.storage.installation_registry import InstallationRegistry, JsonInstallationStore
from antrunner.tools.node import LocalNode
from antrunner.tools.validation import check_home


logger = get_logger(__name__)


def _parse_defines(values: List[str]) -> dict:
    defines = {}
    for value in values:
        key, _, val = value.partition("=")
        defines[key] = val
    return defines


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="antrunner", description="Run Ant as a CI build step")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run an Ant build step in a workspace")
    run.add_argument("targets", nargs="*", help="Targets and other Ant options")
    run.add_argument("--workspace", default=os.getcwd())
    run.add_argument("--module-root")
    run.add_argument("--ant", dest="ant_name", help="Name of a configured Ant installation")
    run.add_argument("--ant-opts")
    run.add_argument("--build-file")
    run.add_argument("--properties", help="Properties in java.util.Properties syntax")
    run.add_argument("-D", dest="defines", action="append", default=[], metavar="KEY=VALUE",
                     help="Build variable, passed to Ant as a property")
    run.add_argument("--sensitive", action="append", default=[], metavar="KEY",
                     help="Build variable whose value is masked in logs")

    add = sub.add_parser("add-installation", help="Configure an Ant installation")
    add.add_argument("name")
    add.add_argument("--home", default="")
    add.add_argument("--install-version", help="Download this Ant version on first use")

    remove = sub.add_parser("remove-installation", help="Remove an Ant installation")
    remove.add_argument("name")

    sub.add_parser("list-installations", help="List configured Ant installations")
    return parser


async def _run(args: argparse.Namespace, registry: InstallationRegistry) -> int:
    listener = BuildListener()
    step = AntBuildStep(
        targets=" ".join(args.targets),
        ant_name=args.ant_name,
        ant_opts=args.ant_opts,
        build_file=args.build_file,
        properties=args.properties,
    )
    context = StepExecutionContext(
        step_id=uuid.uuid4().hex[:12],
        listener=listener,
        launcher=LocalLauncher(listener),
        node=LocalNode(),
        workspace=Path(args.workspace),
        module_root=Path(args.module_root) if args.module_root else None,
        environment=dict(os.environ),
        build_variables=_parse_defines(args.defines),
        sensitive_variables=set(args.sensitive),
    )
    success = await AntInvoker(step, registry).perform(context)
    return 0 if success else 1


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.json_logs, log_dir=settings.log_dir)

    args = _build_parser().parse_args(argv)

    try:
        registry = InstallationRegistry.from_store(JsonInstallationStore(settings.registry_path))

        if args.command == "run":
            return asyncio.run(_run(args, registry))

        if args.command == "add-installation":
            validation = check_home(args.home)
            if not validation.ok:
                print(f"ERROR: {validation.message}", file=sys.stderr)
                return 2
            properties = ()
            if args.install_version:
                properties = (InstallSourceProperty(installers=(AntInstallerSpec(id=args.install_version),)),)
            registry.add(AntInstallation(name=args.name, home=args.home, properties=properties))
            return 0

        if args.command == "remove-installation":
            return 0 if registry.remove(args.name) else 1

        for installation in registry.installations:
            print(f"{installation.name}\t{installation.home}")
        return 0
    except AntRunnerException as e:
        logger.error(f"Ant step aborted: {e}", extra={"error": e.to_dict()})
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
