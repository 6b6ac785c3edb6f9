from __future__ import annotations

"""
Prompt Orchestration Engine.

Coordinates the multi-stage model workflows:
1. Analysis: build and serialize the project tree, classify it through the
   general model and persist the raw response.
2. Prompt processing: finetune the user prompt, classify the expected
   response type, then route to the command or code template.
3. Commit messages: generate a message with the code model and prefix it
   with an emoji chosen by the general model.
4. File editing: rewrite single files, or every file classified as useful
   inside a directory, into sibling ".codeforgedit" files.

Every top-level operation loads one fresh configuration snapshot and passes
it down. Stages report explicit StageResult values; the Engine decides per
stage whether to abort or apply a fallback. Failures are logged and turned
into empty/default results rather than raised.
"""

import logging
import os
from typing import Callable, List, Optional, Sequence

from codeforgeai.core.analysis.classification import apply_classifications, load_classifications
from codeforgeai.core.analysis.ignore_rules import load_ignore_rules, matches
from codeforgeai.core.analysis.tree_builder import build_tree
from codeforgeai.core.analysis.tree_renderer import render_tree
from codeforgeai.core.analysis.tree_serializer import serialize_tree
from codeforgeai.core.models.github_models import TOKEN_ENV, env_token_loader, fetch_model_catalog
from codeforgeai.core.models.registry import ModelRegistry, build_default_registry
from codeforgeai.core.pipeline.stages import call_model, run_stage
from codeforgeai.domain import constants as const
from codeforgeai.domain.config import AppConfig, load_config
from codeforgeai.domain.pipeline_models import (
    AnalysisResult,
    EditManifest,
    EditOutcome,
    Operation,
    PipelineRequest,
    StageResult,
)
from codeforgeai.domain.tree_models import useful_files
from codeforgeai.infra.fs import read_text_file, relative_to, write_text_file
from codeforgeai.infra.git import get_git_diff

logger = logging.getLogger(__name__)


class Engine:
    """
    Orchestrates tree analysis and model pipelines.

    Args:
        config_loader: Callable returning a fresh AppConfig snapshot.
        registry: Provider registry used to build models per role.
        cwd: Project root; defaults to the process working directory at
            call time.
    """

    def __init__(
            self,
            config_loader: Callable[[], AppConfig] = load_config,
            registry: Optional[ModelRegistry] = None,
            cwd: Optional[str] = None,
    ) -> None:
        self._config_loader = config_loader
        self._registry = registry or build_default_registry()
        self._cwd = cwd

    @property
    def cwd(self) -> str:
        return os.path.abspath(self._cwd or os.getcwd())

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    def _load_snapshot(self) -> StageResult[AppConfig]:
        return run_stage("load_config", self._config_loader)

    def _ask(self, cfg: AppConfig, role: str, request: PipelineRequest) -> str:
        """Build the model for a role and send one request through it."""
        model = self._registry.create(cfg, role)
        return call_model(model, request)

    def _model_stage(
            self,
            stage: str,
            cfg: AppConfig,
            role: str,
            operation: Operation,
            prompt: str,
            **metadata: object,
    ) -> StageResult[str]:
        request = PipelineRequest(operation=operation, base_prompt=prompt, metadata=dict(metadata))
        return run_stage(stage, self._ask, cfg, role, request)

    # -------------------------------------------------------------------------
    # Analysis pipeline
    # -------------------------------------------------------------------------

    def run_analysis(self) -> AnalysisResult:
        """
        Classify the working directory and persist the model's answer.

        The response is written verbatim to the analysis result file,
        overwriting previous content; it is not validated.

        Returns:
            AnalysisResult: ok with the result path, or the failed stage.
        """
        cfg_res = self._load_snapshot()
        if not cfg_res.ok:
            return _analysis_failure(cfg_res)
        cfg = cfg_res.value

        root = self.cwd
        logger.info(f"Analyzing directory: {root}")

        tree_res = run_stage("build_tree", build_tree, root)
        if not tree_res.ok:
            return _analysis_failure(tree_res)

        json_res = run_stage("serialize", serialize_tree, tree_res.value)
        if not json_res.ok:
            return _analysis_failure(json_res)

        prompt = cfg.prompt("directory_classification_prompt") + "\n" + json_res.value
        classify_res = self._model_stage(
            "classify", cfg, const.ROLE_GENERAL, Operation.DIRECTORY_CLASSIFICATION, prompt
        )
        if not classify_res.ok:
            return _analysis_failure(classify_res)

        result_path = os.path.join(root, const.ANALYSIS_RESULT_FILENAME)
        persist_res = run_stage("persist", write_text_file, result_path, classify_res.value or "")
        if not persist_res.ok:
            return _analysis_failure(persist_res)

        logger.info(f"Directory analysis complete. Results saved to {result_path}")
        return AnalysisResult(ok=True, result_path=result_path)

    # -------------------------------------------------------------------------
    # Prompt pipeline
    # -------------------------------------------------------------------------

    def process_prompt(self, prompt: str) -> str:
        """
        Finetune, classify and answer a free-form user prompt.

        A failed finetune aborts with an empty result. A failed response-type
        classification falls back to "code".

        Returns:
            str: Final model answer, or "" on failure.
        """
        cfg_res = self._load_snapshot()
        if not cfg_res.ok:
            return ""
        cfg = cfg_res.value

        finetune_res = self._model_stage(
            "finetune",
            cfg,
            const.ROLE_GENERAL,
            Operation.PROMPT_FINETUNE,
            cfg.prompt("prompt_finetune_prompt") + "\n" + prompt,
        )
        if not finetune_res.ok:
            logger.error("Prompt finetune failed. Aborting prompt pipeline.")
            return ""
        finetuned = finetune_res.value or ""

        type_res = self._model_stage(
            "classify_response_type",
            cfg,
            const.ROLE_GENERAL,
            Operation.CLASSIFY_RESPONSE_TYPE,
            cfg.prompt("code_or_command") + "\n" + finetuned,
        )
        if not type_res.ok:
            logger.warning(f"Response type unknown. Defaulting to '{const.DEFAULT_RESPONSE_TYPE}'.")
        response_type = type_res.value_or(const.DEFAULT_RESPONSE_TYPE)

        if const.COMMAND_MARKER in response_type.lower():
            logger.info("Routing prompt to the command agent.")
            final_res = self._model_stage(
                "command_generation",
                cfg,
                const.ROLE_GENERAL,
                Operation.COMMAND_GENERATION,
                cfg.prompt("command_agent_prompt") + "\n" + finetuned,
            )
        else:
            logger.info("Routing prompt to the code model.")
            final_res = self._model_stage(
                "code_generation",
                cfg,
                const.ROLE_CODE,
                Operation.CODE_GENERATION,
                cfg.prompt("code_prompt") + "\n" + finetuned,
            )

        return final_res.value_or("")

    # -------------------------------------------------------------------------
    # Commit-message pipeline
    # -------------------------------------------------------------------------

    def process_commit_message(self, diff: str) -> str:
        """
        Produce "<emoji> <message>" for a diff.

        Message and emoji are separate calls: an emoji failure falls back to
        the default glyph, a message failure yields "".
        """
        cfg_res = self._load_snapshot()
        if not cfg_res.ok:
            return ""
        cfg = cfg_res.value

        message_res = self._model_stage(
            "commit_message",
            cfg,
            const.ROLE_CODE,
            Operation.COMMIT_MESSAGE,
            cfg.prompt("commit_message_prompt") + "\n" + diff,
        )
        if not message_res.ok:
            return ""
        message = (message_res.value or "").strip()

        emoji_res = self._model_stage(
            "gitmoji",
            cfg,
            const.ROLE_GENERAL,
            Operation.GITMOJI_SELECTION,
            cfg.prompt("gitmoji_prompt") + "\n" + message,
        )
        glyph = (emoji_res.value or "").strip() if emoji_res.ok else ""
        if not glyph:
            logger.warning(f"No emoji selected. Using default '{const.DEFAULT_GITMOJI}'.")
            glyph = const.DEFAULT_GITMOJI

        return f"{glyph} {message}"

    def commit_message_for_repo(self) -> str:
        """Generate a commit message from the repository diff at cwd."""
        diff_res = run_stage("git_diff", get_git_diff, self.cwd)
        if not diff_res.ok:
            return ""
        if not (diff_res.value or "").strip():
            logger.warning("No changes found in git diff.")
            return ""
        return self.process_commit_message(diff_res.value or "")

    # -------------------------------------------------------------------------
    # Edit pipeline
    # -------------------------------------------------------------------------

    def edit_files(
            self,
            paths: Sequence[str],
            user_prompt: str,
            allow_ignore: bool = False,
    ) -> EditManifest:
        """
        Edit files or directories into sibling ".codeforgedit" files.

        Originals are never overwritten. Targets matching the ignore rules
        of the working directory are skipped unless allow_ignore is set.
        Files are processed one at a time; a failure never stops siblings.

        Returns:
            EditManifest: Per-file success, failure and skip report.
        """
        manifest = EditManifest()

        cfg_res = self._load_snapshot()
        if not cfg_res.ok:
            for path in paths:
                manifest.add(EditOutcome(path=path, ok=False, error=str(cfg_res.error)))
            return manifest
        cfg = cfg_res.value

        root = self.cwd
        rules = load_ignore_rules(root)

        for path in paths:
            target = path if os.path.isabs(path) else os.path.join(root, path)
            is_dir = os.path.isdir(target)

            if not allow_ignore:
                rel = relative_to(target, root)
                if rel and matches(rel, rules, is_dir=is_dir):
                    logger.info(f"Skipping ignored path: {path}")
                    manifest.add(EditOutcome(path=target, ok=False, skipped=True, error="ignored"))
                    continue

            if is_dir:
                manifest.extend(self._edit_directory(target, user_prompt, cfg))
            else:
                manifest.add(self._edit_file(target, user_prompt, cfg))

        logger.info(
            f"Edit finished: {len(manifest.succeeded)} edited, "
            f"{len(manifest.failed)} failed, {len(manifest.skipped)} skipped."
        )
        return manifest

    def _edit_file(self, file_path: str, user_prompt: str, cfg: AppConfig) -> EditOutcome:
        content_res = run_stage("read_file", read_text_file, file_path)
        if not content_res.ok:
            return EditOutcome(path=file_path, ok=False, error=str(content_res.error))

        prompt = (
            f"{cfg.prompt('edit_finetune_prompt')}\n\nUser Request: {user_prompt}"
            f"\n\nFile: {file_path}\n\n{content_res.value}"
        )
        edit_res = self._model_stage(
            "file_edit", cfg, const.ROLE_CODE, Operation.FILE_EDIT, prompt, file_path=file_path
        )
        if not edit_res.ok:
            logger.error(f"Error editing {file_path}: {edit_res.error}")
            return EditOutcome(path=file_path, ok=False, error=str(edit_res.error))

        output_path = file_path + const.EDIT_SUFFIX
        write_res = run_stage("write_edit", write_text_file, output_path, edit_res.value or "")
        if not write_res.ok:
            return EditOutcome(path=file_path, ok=False, error=str(write_res.error))

        logger.info(f"Edited {file_path} -> {output_path}")
        return EditOutcome(path=file_path, ok=True, output_path=output_path)

    def _edit_directory(self, dir_path: str, user_prompt: str, cfg: AppConfig) -> EditManifest:
        manifest = EditManifest()

        tree_res = run_stage("build_tree", build_tree, dir_path)
        if not tree_res.ok:
            manifest.add(EditOutcome(path=dir_path, ok=False, error=str(tree_res.error)))
            return manifest
        tree = tree_res.value

        # Labels come from the last analysis; nothing is re-classified here
        root = self.cwd
        apply_classifications(tree, load_classifications(root), base=relative_to(dir_path, root))
        targets = useful_files(tree)
        if not targets:
            logger.warning(f"No files classified as useful under {dir_path}.")

        for rel_path in targets:
            manifest.add(self._edit_file(os.path.join(dir_path, rel_path), user_prompt, cfg))
        return manifest

    # -------------------------------------------------------------------------
    # Single-shot helpers
    # -------------------------------------------------------------------------

    def explain_code(self, file_path: str) -> str:
        """Explain a file through the code model; "" on failure."""
        cfg_res = self._load_snapshot()
        if not cfg_res.ok:
            return ""
        cfg = cfg_res.value

        content_res = run_stage("read_file", read_text_file, file_path)
        if not content_res.ok:
            return ""

        prompt = f"{cfg.prompt('explain_code_prompt')}\n\nFile: {file_path}\n\n{content_res.value}"
        res = self._model_stage(
            "explain", cfg, const.ROLE_CODE, Operation.CODE_EXPLANATION, prompt, file_path=file_path
        )
        return res.value_or("")

    def provide_suggestion(
            self,
            file_path: str = "",
            line: int = 0,
            snippet: Optional[List[str]] = None,
            entire: bool = False,
    ) -> str:
        """
        Suggest code for a snippet, a whole file, or the lines around `line`.

        Returns:
            str: Suggestion text, a notice when no content was given, or ""
            on failure.
        """
        cfg_res = self._load_snapshot()
        if not cfg_res.ok:
            return ""
        cfg = cfg_res.value

        content = ""
        if snippet:
            content = "\n".join(snippet)
        elif file_path:
            file_res = run_stage("read_file", read_text_file, file_path)
            if not file_res.ok:
                return ""
            content = _suggestion_context(file_res.value or "", line, entire)

        if not content:
            return const.NO_SUGGESTION_CONTENT

        prompt = f"{cfg.prompt('suggestion_prompt')}\n\n{content}"
        res = self._model_stage(
            "suggestion",
            cfg,
            const.ROLE_CODE,
            Operation.CODE_SUGGESTION,
            prompt,
            file_path=file_path,
            line=line,
        )
        return res.value_or("")

    def render_project_tree(self, show_labels: bool = False) -> List[str]:
        """
        Render the ignore-pruned working directory tree; [] on failure.

        With show_labels, classifications from the last analysis are
        overlaid and printed next to each entry.
        """
        tree_res = run_stage("build_tree", build_tree, self.cwd)
        if not tree_res.ok:
            return []
        tree = tree_res.value
        if show_labels:
            apply_classifications(tree, load_classifications(self.cwd))
        return render_tree(tree, show_classification=show_labels)

    def list_hosted_models(self, token: Optional[str] = None) -> List[str]:
        """List GitHub Models catalog ids; [] without a token or on failure."""
        token = token if token is not None else env_token_loader()
        if not token:
            logger.error(f"No GitHub token available. Set {TOKEN_ENV} to list hosted models.")
            return []
        res = run_stage("fetch_catalog", fetch_model_catalog, token)
        return res.value_or([])


# -----------------------------------------------------------------------------
# MODULE HELPERS
# -----------------------------------------------------------------------------

def _analysis_failure(res: StageResult) -> AnalysisResult:
    logger.error(f"Directory analysis aborted at stage '{res.stage}'.")
    return AnalysisResult(ok=False, failed_stage=res.stage, error=str(res.error))


def _suggestion_context(text: str, line: int, entire: bool) -> str:
    """Select the whole text, or a window of lines around a 1-based line."""
    if entire:
        return text
    if line <= 0:
        return ""
    lines = text.split("\n")
    if line > len(lines):
        return ""
    start = max(0, line - const.SUGGESTION_CONTEXT_LINES)
    end = min(len(lines), line + const.SUGGESTION_CONTEXT_LINES)
    return "\n".join(lines[start:end])
