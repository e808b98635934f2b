"""Git version-control tasks.

Only defined when the project root is a git working copy. The
``git:*`` tasks do the work; the generic hooks (``checkin``,
``precheckin``, ``prerelease``, ``postrelease``, ``update_history``,
``check_history``, ``debug``) are pointed at them so other providers
can hook the same names.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from dv.core.errors import ErrorCode
from dv.core.render import render_template
from dv.core.result import Err, Ok, Result
from dv.git.repository import GitError, StatusEntry
from dv.output.console import Style
from dv.platform.files import replace_file
from dv.release.errors import ReleaseError
from dv.release.history import (
    HistoryDocument,
    check_history,
    heading_marker_for,
    read_history,
    synthesize_new_section,
    unhistoried,
)
from dv.release.tags import current_tag, previous_tag, release_tags
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.generate import readme_context
from dv.tasks.registry import TaskFailure, TaskRegistry, TaskResult, failure

__all__ = ["COMMIT_MSG_FILE", "IGNORE_FILE", "PROVIDER"]

COMMIT_MSG_FILE = "commit-msg.txt"
IGNORE_FILE = ".gitignore"

NEWFILE_CHOICES = ("add", "ignore", "skip", "delete")

_STATUS_STYLES = {
    "M": Style.INFO,
    "A": Style.SUCCESS,
    "D": Style.BOLD,
    "?": Style.WARNING,
    "U": Style.ERROR,
}


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    if not ctx.git.exists():
        ctx.console.trace("Not a git working copy; not defining git tasks")
        return

    registry.define(COMMIT_MSG_FILE, action=_commit_message)
    registry.define("clean", action=_remove_commit_message)

    registry.define(
        "git:prerelease",
        deps=["git:check_history"],
        action=_prerelease,
        description="Prepare for a new release",
    )
    registry.define(
        "git:newfiles",
        action=_newfiles,
        description="Check for new files and offer to add/ignore/delete them",
    )
    registry.define("git:add", deps=["git:newfiles"])
    registry.define("git:pull", action=_pull, description="Pull and update from the default repo")
    registry.define(
        "git:precheckin",
        deps=["git:pull", "git:newfiles", "git:check_for_changes"],
        description="Git-specific pre-checkin hook",
    )
    registry.define(
        "git:checkin",
        deps=[COMMIT_MSG_FILE],
        action=_checkin,
        description="Check the current code in",
    )
    registry.define("git:postrelease", action=_postrelease, description="Git-specific post-release hook")
    registry.define("git:push", action=_push, description="Push to the default origin repo (if there is one)")
    registry.define(
        "git:check_history",
        action=_check_history,
        description="Check the history file to ensure it contains an entry for each release tag",
    )
    registry.define(
        "git:update_history",
        action=_update_history,
        description="Generate and edit a new version entry in the history file",
    )
    registry.define("git:check_for_changes", action=_check_for_changes)
    registry.define("git:debug", action=_debug)

    registry.define("checkin", deps=["git:checkin"], description="Check the current code in")
    registry.define("precheckin", deps=["git:precheckin"])
    registry.define("prerelease", deps=["git:prerelease"])
    registry.define("postrelease", deps=["git:postrelease"])
    registry.define(
        "update_history",
        deps=["git:update_history"],
        description="Update the history file with the changes since the last version tag",
    )
    registry.define(
        "check_history",
        deps=["git:check_history"],
        description="Check the history file against the release tags",
    )
    registry.define("debug", deps=["git:debug"])


# -----------------------------------------------------------------------------
# Release tags and history
# -----------------------------------------------------------------------------


def _release_tags(ctx: TaskContext) -> Result[list[str], GitError]:
    match ctx.git.tags():
        case Err(e):
            return Err(e)
        case Ok(tags):
            return Ok(release_tags(tags, ctx.project.release_tag_prefix))


def _current_tag(ctx: TaskContext) -> str:
    return current_tag(ctx.project.release_tag_prefix, ctx.project.version)


def _history(ctx: TaskContext) -> Result[HistoryDocument, ReleaseError]:
    return read_history(ctx.project.history_file, ctx.project.release_tag_prefix)


def _history_name(ctx: TaskContext) -> str:
    return ctx.project.history_file.relative_to(ctx.project.root).as_posix()


def _check_history(ctx: TaskContext) -> TaskResult:
    document = _history(ctx)
    if isinstance(document, Err):
        return failure(document.error)

    ctx.console.print("Checking history...")
    tags = _release_tags(ctx)
    if isinstance(tags, Err):
        return failure(tags.error)

    match check_history(tags.value, document.value, _current_tag(ctx), history_name=_history_name(ctx)):
        case Err(e):
            return failure(e)
        case Ok(_):
            return Ok(None)


def _update_history(ctx: TaskContext) -> TaskResult:
    project = ctx.project
    console = ctx.console

    document = _history(ctx)
    if isinstance(document, Err):
        return failure(document.error)
    marker = heading_marker_for(project.history_file)
    if isinstance(marker, Err):
        return failure(marker.error)
    tags = _release_tags(ctx)
    if isinstance(tags, Err):
        return failure(tags.error)

    version_tag = _current_tag(ctx)
    since = previous_tag(tags.value, version_tag)
    console.print(f"Updating history for {version_tag}...")

    if document.value.header is None:
        console.warning("History file needs a header with a `---` marker to support updating.")
        console.print("Adding an auto-generated one.")

    log = ctx.git.log(since=since)
    if isinstance(log, Err):
        return failure(log.error)

    candidate = synthesize_new_section(
        document.value,
        current_tag=version_tag,
        author=project.authors[0] if project.authors else "",
        day=ctx.now().date(),
        log_entries=[entry.message for entry in log.value],
        marker=marker.value,
        render_header=lambda: render_template(
            f"History{project.history_file.suffix}.j2", **readme_context(project)
        ),
    )
    if isinstance(candidate, Err):
        return failure(candidate.error)

    return _edit_and_replace(ctx, candidate.value)


def _edit_and_replace(ctx: TaskContext, candidate: str) -> TaskResult:
    """Let the operator edit ``candidate``, then install it as the history file."""
    history_file = ctx.project.history_file
    fd, tmp_name = tempfile.mkstemp(prefix="History", suffix=history_file.suffix)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(candidate)

        ctx.prompt.edit(tmp_path)

        edited = tmp_path.read_text(encoding="utf-8")
        if not edited:
            ctx.console.error("Empty file: aborting.")
            return Ok(None)

        replace_file(history_file, edited)
        ctx.console.success(f"Updated {_history_name(ctx)}")
        return Ok(None)
    except OSError as e:
        return Err(TaskFailure(message=f"Cannot update {_history_name(ctx)}: {e}", code=ErrorCode.IO_ERROR))
    finally:
        tmp_path.unlink(missing_ok=True)


# -----------------------------------------------------------------------------
# Release
# -----------------------------------------------------------------------------


def _prerelease(ctx: TaskContext) -> TaskResult:
    git = ctx.git
    console = ctx.console

    status = git.status()
    if isinstance(status, Err):
        return failure(status.error)

    uncommitted = status.value.changed
    if uncommitted:
        _show_file_statuses(ctx, uncommitted)
        if not ctx.prompt.yes("Release anyway?", default=False):
            return failure(ReleaseError(kind="declined", message="Release aborted: uncommitted changes"))
        console.warning("Okay, releasing with uncommitted versions.")

    version_tag = _current_tag(ctx)
    tags = git.tags()
    if isinstance(tags, Err):
        return failure(tags.error)
    if version_tag in tags.value:
        return failure(
            ReleaseError(
                kind="tag_exists",
                message=f"Version {ctx.project.version} already has a tag.",
                hint="Bump the version before releasing",
                tags=(version_tag,),
            )
        )

    rev = git.head_rev()
    if isinstance(rev, Err):
        return failure(rev.error)

    sign = ctx.config.sign_tags and ctx.prompt.yes(f"Sign {version_tag}?")
    console.success(f"Tagging rev {rev.value} as {version_tag}")
    match git.tag(version_tag, rev=rev.value, sign=sign, message=f"Signing {version_tag}" if sign else None):
        case Err(e):
            return failure(e)
        case Ok(_):
            return Ok(None)


def _postrelease(ctx: TaskContext) -> TaskResult:
    git = ctx.git
    checksum_dir = ctx.project.checksum_dir.relative_to(ctx.project.root).as_posix()

    status = git.status()
    if isinstance(status, Err):
        return failure(status.error)

    artifacts = [e for e in status.value.entries if e.path.startswith(f"{checksum_dir}/")]
    if artifacts:
        ctx.console.print("Adding release artifacts...")
        added = git.add([checksum_dir])
        if isinstance(added, Err):
            return failure(added.error)
        committed = git.commit(message="Adding release checksum.", paths=[checksum_dir])
        if isinstance(committed, Err):
            return failure(committed.error)

    return ctx.invoke("git:push")


# -----------------------------------------------------------------------------
# Check-in
# -----------------------------------------------------------------------------


def _commit_message(ctx: TaskContext) -> TaskResult:
    """Have the operator write the commit message, starting from the diff."""
    path = ctx.project.root / COMMIT_MSG_FILE
    if path.exists() and path.stat().st_size:
        return Ok(None)

    diff = ctx.git.diff()
    if isinstance(diff, Err):
        return failure(diff.error)

    commented = "".join(f"# {line}\n" for line in diff.value.splitlines())
    path.write_text("\n" + commented, encoding="utf-8")
    ctx.prompt.edit(path)

    if not _strip_comments(path.read_text(encoding="utf-8")):
        path.unlink(missing_ok=True)
        return failure(ReleaseError(kind="declined", message="Empty commit message; aborting."))
    return Ok(None)


def _strip_comments(message: str) -> str:
    return "\n".join(line for line in message.splitlines() if not line.startswith("#")).strip()


def _remove_commit_message(ctx: TaskContext) -> TaskResult:
    (ctx.project.root / COMMIT_MSG_FILE).unlink(missing_ok=True)
    return Ok(None)


def _checkin(ctx: TaskContext) -> TaskResult:
    path = ctx.project.root / COMMIT_MSG_FILE
    message = _strip_comments(path.read_text(encoding="utf-8"))

    ctx.console.print("---", Style.INFO)
    ctx.console.print(message)
    ctx.console.print("---", Style.INFO)

    if not ctx.prompt.yes("Continue with checkin?"):
        return failure(ReleaseError(kind="declined", message="Checkin aborted"))

    committed = ctx.git.commit(message_file=path)
    if isinstance(committed, Err):
        return failure(committed.error)
    path.unlink(missing_ok=True)

    return ctx.invoke("git:push")


def _check_for_changes(ctx: TaskContext) -> TaskResult:
    status = ctx.git.status()
    if isinstance(status, Err):
        return failure(status.error)
    if status.value.is_clean:
        return Err(TaskFailure(message="Working copy is clean.", code=ErrorCode.USER_ERROR))
    return Ok(None)


def _newfiles(ctx: TaskContext) -> TaskResult:
    git = ctx.git
    console = ctx.console

    console.print("Checking for new files...")
    status = git.status()
    if isinstance(status, Err):
        return failure(status.error)

    to_add = [e.path for e in status.value.changed]
    to_ignore: list[str] = []
    to_delete: list[str] = []

    for entry in status.value.untracked:
        choice = ctx.prompt.select(f"  {entry.path}: untracked", NEWFILE_CHOICES, default="skip")
        if choice == "add":
            to_add.append(entry.path)
        elif choice == "ignore":
            to_ignore.append(entry.path)
        elif choice == "delete":
            to_delete.append(entry.path)

    if to_add:
        console.trace(f"Adding: {', '.join(to_add)}")
        added = git.add(to_add)
        if isinstance(added, Err):
            return failure(added.error)

    if to_ignore:
        result = _ignore_files(ctx, to_ignore)
        if isinstance(result, Err):
            return result

    if to_delete:
        return _delete_extra_files(ctx, to_delete)
    return Ok(None)


def _ignore_files(ctx: TaskContext, paths: list[str]) -> TaskResult:
    ctx.console.trace(f"Ignoring {len(paths)} files.")
    ignore_file = ctx.project.root / IGNORE_FILE
    try:
        with ignore_file.open("a", encoding="utf-8") as handle:
            handle.writelines(f"{p}\n" for p in paths)
    except OSError as e:
        return Err(TaskFailure(message=f"Cannot update {IGNORE_FILE}: {e}", code=ErrorCode.IO_ERROR))
    return Ok(None)


def _delete_extra_files(ctx: TaskContext, paths: list[str]) -> TaskResult:
    ctx.console.print("Files to delete:")
    for p in paths:
        ctx.console.print(f"  {p}", Style.WARNING)
    if not ctx.prompt.yes(f"Really delete {len(paths)} files?", default=False):
        ctx.console.print("Not deleting anything.")
        return Ok(None)

    for p in paths:
        target = ctx.project.root / p
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink(missing_ok=True)
        except OSError as e:
            return Err(TaskFailure(message=f"Cannot delete {p}: {e}", code=ErrorCode.IO_ERROR))
    return Ok(None)


def _show_file_statuses(ctx: TaskContext, entries: list[StatusEntry]) -> None:
    ctx.console.header("Uncommitted files:")
    for entry in entries:
        ctx.console.print(
            f"  {entry.path}: {entry.description}",
            _STATUS_STYLES.get(entry.code, Style.DEFAULT),
        )


# -----------------------------------------------------------------------------
# Remote
# -----------------------------------------------------------------------------


def _pull(ctx: TaskContext) -> TaskResult:
    git = ctx.git
    url = git.remote_url("origin")
    if url is None:
        ctx.console.trace("Skipping pull: No 'origin' remote.")
        return Ok(None)

    if not ctx.prompt.yes(f"Pull and update from '{url}'?"):
        return Ok(None)

    ctx.console.print("Fetching...")
    fetched = git.fetch("origin", prune=True)
    if isinstance(fetched, Err):
        return failure(fetched.error)

    ctx.console.print("Pulling...")
    match git.pull("origin", git.current_branch()):
        case Err(e):
            return failure(e)
        case Ok(_):
            return Ok(None)


def _push(ctx: TaskContext) -> TaskResult:
    git = ctx.git
    url = git.remote_url("origin")
    if url is None:
        ctx.console.trace("Skipping push: No 'origin' remote.")
        return Ok(None)

    if not ctx.prompt.yes(f"Push to '{url}'?", default=False):
        return failure(ReleaseError(kind="declined", message="Push aborted"))

    set_upstream = False
    if not git.has_upstream():
        set_upstream = ctx.prompt.yes("Create tracking branch?", default=True)

    match git.push("origin", git.current_branch(), set_upstream=set_upstream):
        case Err(e):
            return failure(e)
        case Ok(_):
            ctx.console.success("Done.")
            return Ok(None)


# -----------------------------------------------------------------------------
# Debug
# -----------------------------------------------------------------------------


def _debug(ctx: TaskContext) -> TaskResult:
    console = ctx.console
    console.header("Git Info")
    console.print(f"Release tag prefix: {ctx.project.release_tag_prefix}")

    tags = _release_tags(ctx)
    if isinstance(tags, Err):
        return failure(tags.error)
    console.print("Version tags:")
    for tag in tags.value:
        console.print(f"- {tag}", Style.BOLD)

    document = _history(ctx)
    history_tags = document.value.tags if isinstance(document, Ok) else []
    console.print("History file versions:")
    for tag in history_tags:
        console.print(f"- {tag}", Style.BOLD)

    console.print("Unhistoried version tags:")
    for tag in unhistoried(tags.value, history_tags, _current_tag(ctx)):
        console.print(f"- {tag}", Style.BOLD)

    console.newline()
    return Ok(None)


PROVIDER = Provider(name="git", define_tasks=_define_tasks)
