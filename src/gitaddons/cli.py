"""Command line interface for git-addons."""

from pathlib import Path
from typing import Annotated, Optional, Sequence

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt
from rich.table import Table

from gitaddons.branches import Branch, BranchCatalog
from gitaddons.git import (
    DEFAULT_REMOTE,
    BranchListingError,
    BranchNotFoundError,
    CheckoutError,
    FetchError,
    GitError,
    GitRepo,
    LogError,
    RebaseError,
)
from gitaddons.history import DEFAULT_TIME_RANGE, LOG_FORMAT, TIME_RANGES, Commit, parse_log, unique_authors
from gitaddons.logging_config import setup_logging
from gitaddons.resolver import RebaseSkip, RebaseTarget, SkipReason, SwitchResolver

app = typer.Typer(help="Interactive helpers on top of git")
console = Console()

PathOption = Annotated[Path, typer.Option(help="Path to git repository", envvar="GIT_ADDONS_PATH")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log every git command that is run")]

RULE = "=" * 50


def get_repo(path: Path) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path)
    except GitError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


def choose(title: str, column: str, options: Sequence[str], prompt: str) -> int:
    """Show numbered options and return the index the user picked."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("#", style="magenta", justify="right")
    table.add_column(column, style="cyan", no_wrap=True)
    for number, option in enumerate(options, start=1):
        table.add_row(str(number), escape(option))
    console.print(table)

    while True:
        choice = IntPrompt.ask(prompt, console=console)
        if 1 <= choice <= len(options):
            return choice - 1
        console.print(f"[red]Please enter a number between 1 and {len(options)}[/red]")


def load_catalog(repo: GitRepo, remote: str) -> BranchCatalog:
    """Fetch from remotes and build the branch catalog."""
    with console.status("Fetching latest changes from all remotes..."):
        try:
            repo.fetch_all()
            fetched = True
        except FetchError:
            fetched = False
    if fetched:
        print("[green]Fetched latest changes from all remotes[/green]")
    else:
        print("[yellow]Warning: Could not fetch from remotes. Proceeding with local branches only.[/yellow]")

    try:
        return BranchCatalog.build(repo.list_local_branches(), repo.list_remote_branches(), remote=remote)
    except BranchListingError as err:
        print(f"[red]Error fetching branches:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


def select_branch(catalog: BranchCatalog, name: Optional[str]) -> Branch:
    """Pick the branch named on the command line, or ask for one."""
    if name is None:
        index = choose(
            "Available Branches",
            "Branch",
            [branch.display_name for branch in catalog],
            "Select a branch to switch to",
        )
        return catalog[index]
    try:
        return catalog.find(name)
    except BranchNotFoundError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


def skip_message(skip: RebaseSkip) -> str:
    if skip.reason is SkipReason.UNDETERMINABLE:
        return "[yellow]Warning: Could not determine main branch. Skipping rebase.[/yellow]"
    if skip.reason is SkipReason.ALREADY_ON_TARGET:
        return f"[blue]Already on {escape(skip.target or '')}, skipping rebase.[/blue]"
    return "[blue]Skipping rebase (--no-rebase flag specified)[/blue]"


def run_rebase(repo: GitRepo, target: RebaseTarget) -> bool:
    """Rebase onto the target and report the outcome. Returns True on success."""
    try:
        with console.status(f"Rebasing {escape(target.branch)} onto {escape(target.source)}..."):
            repo.rebase(target)
    except RebaseError as err:
        print("[red]Rebase failed[/red]")
        print(f"[red]{escape(str(err))}[/red]")
        print("[yellow]You may need to resolve conflicts manually and run 'git rebase --continue'[/yellow]")
        if err.status_report:
            print("\n[blue]Current git status:[/blue]")
            console.print(err.status_report, markup=False, highlight=False)
        return False
    print(f"[green]Successfully rebased {escape(target.branch)} onto {escape(target.source)}[/green]")
    return True


@app.command()
def switch(
    branch: Annotated[Optional[str], typer.Argument(help="Branch to switch to; prompts when omitted")] = None,
    no_rebase: Annotated[bool, typer.Option("--no-rebase", help="Skip automatic rebase after switching branches")] = False,
    preview: Annotated[bool, typer.Option("--preview", help="Preview the commands before execution")] = False,
    path: PathOption = Path("."),
    remote: Annotated[str, typer.Option(help="Remote whose branches are offered", envvar="GIT_ADDONS_REMOTE")] = DEFAULT_REMOTE,
    verbose: VerboseOption = False,
) -> None:
    """Switch branches interactively, then rebase onto the default branch.

    Remote-only branches get a local tracking branch. After switching, the
    branch is rebased onto the remote copy of main, master or the remote's
    default branch, whichever is found first.
    """
    setup_logging(verbose)
    repo = get_repo(path)
    catalog = load_catalog(repo, remote)

    if not catalog:
        print("[yellow]No other branches available to switch to.[/yellow]")
        return

    selected = select_branch(catalog, branch)
    resolver = SwitchResolver(repo.runner, remote=remote)
    action = resolver.plan(selected, rebase=not no_rebase)

    if preview:
        print("\n[blue]Preview mode - commands that would be executed:[/blue]")
        print(f"[blue]{RULE}[/blue]")
        print(f"[blue]Switch command:[/blue] {escape(str(action.checkout))}")
        if isinstance(action.rebase, RebaseTarget):
            print(f"[blue]Rebase command:[/blue] {escape(str(action.rebase))}")
        else:
            print(skip_message(action.rebase))
        print(f"[blue]{RULE}[/blue]")
        print("[blue]End of preview[/blue]")
        return

    local_name = action.checkout.local_name
    shown_name = escape(local_name)
    try:
        with console.status(f"Switching to branch {shown_name}..."):
            repo.checkout(action.checkout)
    except CheckoutError as err:
        print(f"[red]{escape(str(err))}[/red]")
        raise typer.Exit(code=1) from err
    print(f"[green]Successfully switched to branch {shown_name}[/green]")

    if isinstance(action.rebase, RebaseTarget):
        if not run_rebase(repo, action.rebase):
            print(f"\n[yellow]Switched to {shown_name}, but the rebase needs your attention.[/yellow]")
            return
    else:
        print(skip_message(action.rebase))

    console.print(
        Panel(
            "[green]Branch switch completed successfully! ✅[/green]",
            style="green",
            padding=(0, 2),
            expand=False,
        )
    )


def commits_table(commits: Sequence[Commit], author: str, since: str) -> Table:
    """Create a table of commits."""
    table = Table(
        title=f"Commits by {escape(author)} since {escape(since)}",
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("Commit Hash", style="yellow", no_wrap=True)
    table.add_column("Date", style="green", no_wrap=True)
    table.add_column("Commit Message", style="cyan")
    table.add_column("Refs", style="magenta")
    for commit in commits:
        table.add_row(commit.hash, commit.date, escape(commit.message), escape(commit.refs))
    return table


@app.command()
def who(
    author: Annotated[Optional[str], typer.Argument(help="Author to show commits for (defaults to git user.name)")] = None,
    pick_author: Annotated[bool, typer.Option("--pick-author", "-t", help="Choose the author from the contributors")] = False,
    pick_range: Annotated[bool, typer.Option("--pick-range", "-T", help="Choose the time range interactively")] = False,
    since: Annotated[str, typer.Option("--since", "-s", help="How far back to look, in git's date syntax")] = DEFAULT_TIME_RANGE,
    path: PathOption = Path("."),
    verbose: VerboseOption = False,
) -> None:
    """View git logs for an author over a time range."""
    setup_logging(verbose)
    repo = get_repo(path)

    try:
        if pick_author:
            contributors = unique_authors(repo.contributors())
            if not contributors:
                print("[yellow]No contributors found.[/yellow]")
                return
            author = contributors[choose("Contributors", "Author", contributors, "Select author")]
        elif not author:
            author = repo.user_name()
            if not author:
                print("[red]Error:[/red] No author given and git user.name is not set")
                raise typer.Exit(code=1)

        if pick_range:
            since = TIME_RANGES[choose("Time Ranges", "Since", TIME_RANGES, "Select time range")]

        commits = parse_log(repo.log(author, since, LOG_FORMAT))
    except LogError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err

    if not commits:
        print(f"[yellow]No commits found for {escape(author)} since {escape(since)}.[/yellow]")
        return
    console.print(commits_table(commits, author, since))


if __name__ == "__main__":
    app()
