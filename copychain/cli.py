"""Terminal client - runs the copy chain against a /generate-copy backend.

    copychain "Online course teaching sourdough baking" --all --save "Sourdough"
    copychain --project <id> --step usp
    copychain --project <id> --continue vsl_longa
"""

import argparse
import asyncio
import getpass
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from copychain.application.copywriter.orchestrator import StepOrchestrator
from copychain.domain.entities.generation_context import (
    VALID_LANGUAGES,
    VALID_REGIONS,
    GenerationContext,
    ToneFormality,
)
from copychain.domain.entities.pipeline_state import PipelineSnapshot
from copychain.domain.entities.steps import STEPS, step_index
from copychain.domain.errors import IdentityError
from copychain.domain.ports.config import AppConfig
from copychain.infrastructure.auth.gotrue import GoTrueIdentity, StaticTokenIdentity
from copychain.infrastructure.auth.session import SessionManager
from copychain.infrastructure.config import load_config
from copychain.infrastructure.gateway.http_gateway import HttpGenerationGateway
from copychain.infrastructure.persistence.project_store import Project, ProjectsStore
from copychain.shared.logging import setup_logging

logger = logging.getLogger(__name__)


class StreamPrinter:
    """Writes the growing streaming buffer to a text stream as it arrives."""

    def __init__(self, out=None) -> None:
        self._out = out or sys.stdout
        self._step = None
        self._printed = ""

    def __call__(self, snapshot: PipelineSnapshot) -> None:
        if not snapshot.is_generating and snapshot.streaming_buffer == self._printed:
            return
        if snapshot.current_step_index != self._step:
            self._step = snapshot.current_step_index
            self._printed = ""
            if 0 <= self._step < len(STEPS):
                step = STEPS[self._step]
                self._out.write(f"\n\n{step.icon} {step.label}\n{'=' * 40}\n")
        text = snapshot.streaming_buffer
        if text.startswith(self._printed):
            self._out.write(text[len(self._printed):])
        else:
            self._out.write(f"\n{text}")
        self._printed = text
        self._out.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="copychain",
        description="Generate marketing copy step by step.",
    )
    parser.add_argument("product", nargs="?", help="Product description (or --product-file)")
    parser.add_argument("--product-file", type=Path, help="Read the product description from a file")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--step", help="Generate a single step by id")
    target.add_argument("--all", action="store_true", help="Generate every step in order")
    target.add_argument("--continue", dest="continue_step", metavar="STEP",
                        help="Continue a saved step from where it stopped (needs --project)")
    target.add_argument("--list-steps", action="store_true", help="Print the step catalog and exit")
    parser.add_argument("--provider", choices=("deepseek", "openai"))
    parser.add_argument("--language", choices=VALID_LANGUAGES, default="pt-BR")
    parser.add_argument("--region", choices=VALID_REGIONS, default="auto")
    parser.add_argument("--tone", choices=[t.value for t in ToneFormality], default="neutral")
    parser.add_argument("--allow-real-names", action="store_true")
    parser.add_argument("--project", help="Load product and results from a saved project id")
    parser.add_argument("--save", metavar="NAME", help="Save results as a new project")
    parser.add_argument("--gateway-url", help="Override the /generate-copy URL")
    parser.add_argument("--token", help="Bearer token (default: COPYCHAIN_TOKEN)")
    parser.add_argument("--email", help="Sign in with GoTrue email/password instead of a token")
    parser.add_argument("--config-dir", type=Path)
    parser.add_argument("--log-level", default="WARNING")
    return parser


async def _build_session(args: argparse.Namespace, config: AppConfig) -> SessionManager:
    auth = config.auth
    if args.email:
        if not auth.supabase_url:
            raise SystemExit("--email needs SUPABASE_URL to be configured")
        identity = GoTrueIdentity(auth.supabase_url, auth.supabase_anon_key, timeout=auth.timeout)
        session = SessionManager(identity)
        try:
            signed_in = await identity.sign_in_with_password(args.email, getpass.getpass("Password: "))
        except IdentityError as e:
            await session.close()
            raise SystemExit(f"Sign in failed: {e}")
        await session.sign_in(signed_in)
        return session
    session = SessionManager(StaticTokenIdentity(args.token or auth.client_token))
    await session.initialize()
    return session


def _print_steps() -> None:
    for i, step in enumerate(STEPS):
        print(f"{i:>2}  {step.id:<14} {step.icon} {step.label:<12} {step.description}")


async def run(args: argparse.Namespace) -> int:
    config = load_config(args.config_dir) if args.config_dir else load_config()
    store = ProjectsStore(Path(config.persistence.projects_file))

    project: Project | None = None
    if args.project:
        project = store.get_project(args.project)
        if project is None:
            print(f"Project not found: {args.project}", file=sys.stderr)
            return 2
        logger.info("Loaded project %s (%d saved steps)", project.id, len(project.copy_results))

    product = args.product
    if args.product_file:
        product = args.product_file.read_text(encoding="utf-8")
    if not product and project is not None:
        product = project.product_input
    if not product or not product.strip():
        print("A product description is required", file=sys.stderr)
        return 2

    if project is not None and not args.provider:
        provider = project.provider
        context = GenerationContext.from_raw(project.generation_context)
    else:
        provider = args.provider or config.providers.default
        context = GenerationContext(
            language_code=args.language,
            cultural_region=args.region,
            tone_formality=ToneFormality(args.tone),
            avoid_real_names=not args.allow_real_names,
        )

    session = await _build_session(args, config)
    gateway = HttpGenerationGateway(
        args.gateway_url or config.gateway.url,
        session,
        timeout=config.gateway.timeout,
    )
    orchestrator = StepOrchestrator(
        gateway,
        provider=provider,
        generation_context=context,
        step_delay=config.gateway.step_delay,
    )
    orchestrator.set_product_input(product)
    if project is not None:
        orchestrator.load_results(project.copy_results)
    orchestrator.subscribe(StreamPrinter())

    try:
        if args.continue_step:
            index = step_index(args.continue_step)
            partial = orchestrator.snapshot().results.get(args.continue_step)
            if index < 0 or not partial:
                print(f"No saved text to continue for step: {args.continue_step}", file=sys.stderr)
                return 2
            outcomes = [await orchestrator.generate_step(index, continue_from=partial)]
        elif args.step:
            index = step_index(args.step)
            if index < 0:
                print(f"Unknown step: {args.step}", file=sys.stderr)
                return 2
            outcomes = [await orchestrator.generate_step(index)]
        elif args.all:
            outcomes = await orchestrator.generate_all()
        else:
            done = orchestrator.snapshot().results
            nxt = next((i for i, s in enumerate(STEPS) if s.id not in done), None)
            if nxt is None:
                print("All steps already generated", file=sys.stderr)
                return 0
            outcomes = [await orchestrator.generate_step(nxt)]
    finally:
        await gateway.close()
        await session.close()
    print()

    results = dict(orchestrator.snapshot().results)
    if project is not None:
        store.update_results(project.id, results)
    elif args.save:
        saved = store.create_project(
            args.save,
            product_input=product,
            provider=provider,
            generation_context=context.to_wire(),
        )
        store.update_results(saved.id, results)
        print(f"Saved project {saved.id}", file=sys.stderr)

    failed = [o for o in outcomes if o is not None and not o.completed]
    return 1 if failed else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, stream=sys.stderr, json_output=False)
    if args.list_steps:
        _print_steps()
        return 0
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
