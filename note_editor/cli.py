from __future__ import annotations
import argparse
import json
import logging
import os
from pathlib import Path

from note_editor.cancellation import CancellationToken
from note_editor.changelog import render_txt, write_json
from note_editor.editops import EditOptions, LENGTH_ADJUSTMENTS, TONES
from note_editor.llm.client import ClaudeClient, LLMConfig
from note_editor.orchestrator import OrchestratorConfig, apply_ai_edits
from note_editor.rules.load_rules import (
    DEFAULT_SETTINGS_PATH,
    load_edit_settings,
    load_settings_pack,
    use_edit_settings,
)


def _build_client(args, pack) -> ClaudeClient:
    model = args.llm_model or pack.get("model") or LLMConfig.model
    return ClaudeClient(LLMConfig(
        api_key=args.anthropic_api_key,
        model=model,
        request_timeout=args.timeout,
    ))


def main(argv=None, client=None):
    ap = argparse.ArgumentParser(
        prog="note-edit",
        description="Apply AI edits to a markdown note"
    )
    ap.add_argument("input_note", help="Path to input note (markdown or text)")
    ap.add_argument("--out", help="Write the edited note here (only when a material change was made)")
    ap.add_argument("--result-json", help="Write the full edit result as JSON")

    edit_group = ap.add_argument_group("Edits")
    edit_group.add_argument("--format-markdown", action="store_true", help="Fix markdown structure: headings, lists, spacing")
    edit_group.add_argument("--fix-grammar", action="store_true", help="Fix grammar, spelling and punctuation")
    edit_group.add_argument("--add-headings", action="store_true", help="Add section headings")
    edit_group.add_argument("--improve-structure", action="store_true", help="Reorganize for better flow")
    edit_group.add_argument("--length", default="keep", choices=LENGTH_ADJUSTMENTS, help="Adjust length (default: keep)")
    edit_group.add_argument("--tone", choices=TONES, help="Target tone (reserved, not applied yet)")
    edit_group.add_argument(
        "--sequential",
        action="store_true",
        help="Chain edits within a batch instead of running them in parallel (slower, keeps every edit)"
    )

    llm_group = ap.add_argument_group("LLM Options")
    llm_group.add_argument(
        "--anthropic-api-key",
        default=os.environ.get("ANTHROPIC_API_KEY"),
        help="Anthropic API key (or set ANTHROPIC_API_KEY env var)"
    )
    llm_group.add_argument("--llm-model", default=None, help="Claude model (default: from settings pack)")
    llm_group.add_argument("--settings", default=DEFAULT_SETTINGS_PATH, help="Path to edit settings YAML")
    llm_group.add_argument("--timeout", type=float, default=30.0, help="Overall deadline in seconds (default: 30)")

    ap.add_argument("--verbose", action="store_true", help="Debug logging")

    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if client is None and not args.anthropic_api_key:
        ap.error("an Anthropic API key is required (--anthropic-api-key or ANTHROPIC_API_KEY environment variable)")

    pack = load_settings_pack(args.settings) if Path(args.settings).exists() else {}
    use_edit_settings(load_edit_settings(pack))

    content = Path(args.input_note).read_text(encoding="utf-8")
    options = EditOptions(
        format_markdown=args.format_markdown,
        fix_grammar=args.fix_grammar,
        add_headings=args.add_headings,
        improve_structure=args.improve_structure,
        length_adjustment=args.length,
        tone=args.tone,
    )

    def progress(event):
        if event.duration_ms is not None:
            print(f"  {event.edit_type}: {event.status} ({event.duration_ms:.0f} ms)")
        else:
            print(f"  {event.edit_type}: {event.status}")

    print(f"Editing note: {args.input_note} ({len(content)} chars)")
    result = apply_ai_edits(
        content,
        options,
        client or _build_client(args, pack),
        cancel_token=CancellationToken.with_timeout(args.timeout),
        progress_callback=progress,
        config=OrchestratorConfig(sequential_batches=args.sequential),
    )

    written = None
    if args.out and result.success and result.error is None:
        Path(args.out).write_text(result.content, encoding="utf-8")
        written = args.out

    if args.result_json:
        write_json(args.result_json, result.to_dict())

    print(render_txt(result))
    output = {
        "success": result.success,
        "code": result.error_code,
        "applied": [e.type for e in result.applied_edits],
        "failed": [e.type for e in result.failed_edits or []],
        "change_percentage": round(result.change_percentage, 1),
        "processing_time_s": round(result.processing_time_ms / 1000, 1),
        "output_file": written,
    }
    print(json.dumps(output, indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
