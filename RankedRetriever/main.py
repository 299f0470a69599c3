"""
RankedRetriever command line interface.

    ranked-retriever index COLLECTION_DIR INDEX_DIR [STOPWORDS_FILE]
    ranked-retriever search INDEX_DIR K QUERY... [--feedback]
"""
import argparse
import logging
import sys
import time

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from RankedRetriever.build_inverted_index import InvertedIndexBuilder, build_stopwords
from RankedRetriever.config import DEFAULT_STOPWORDS_FILE, load_config
from RankedRetriever.errors import RetrieverError
from RankedRetriever.tfidf_search.relevance_feedback import FeedbackPrompt, run_feedback_loop
from RankedRetriever.tfidf_search.tfidf_search import SearchResults, TFIDFSearchEngine

console = Console()
logger = logging.getLogger("RankedRetriever")


def display_results(results: SearchResults, out: Console = console) -> None:
    """Display search results in a formatted way"""
    if results.is_empty:
        out.print("[yellow]No results found.[/yellow]")
        return

    if results.is_partial:
        out.print(f"[yellow]Only {results.found} of the {results.requested} requested "
                  f"results were found.[/yellow]")

    table = Table(
        box=box.HEAVY_EDGE,
        show_header=True,
        header_style="bold magenta",
        title=f"[bold]Found {results.found} document(s) ranked by relevance[/bold]",
        title_style="yellow"
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Document", style="cyan bold")
    table.add_column("Score", style="yellow", justify="right")

    for i, (name, score) in enumerate(results):
        row_style = "on blue" if i == 0 else ""
        table.add_row(str(i + 1), name, f"{score:.4f}", style=row_style)

    out.print(table)


class ConsoleFeedbackPrompt(FeedbackPrompt):
    """Asks for relevance judgments on the terminal."""

    def __init__(self, out: Console = console):
        self.console = out

    def show_results(self, results: SearchResults) -> None:
        display_results(results, self.console)

    def wants_feedback(self) -> bool:
        return Confirm.ask("Refine the results with relevance feedback?", console=self.console, default=False)

    def is_relevant(self, document: str) -> bool:
        return Confirm.ask(f"Is the document [cyan]{document}[/cyan] relevant?", console=self.console)


def run_index(args, config) -> None:
    console.print(Panel(
        "[bold blue]RankedRetriever[/bold blue] [yellow]Indexer[/yellow]",
        border_style="blue",
        width=80
    ))

    start_time = time.time()
    builder = InvertedIndexBuilder(args.stopwords, config=config)
    with console.status("Indexing documents..."):
        builder.build_from_directory(args.collection)
        output_file = builder.save(args.index_dir)

    console.print(f"[green]Indexed [bold]{builder.document_count}[/bold] documents, "
                  f"[bold]{len(builder.index)}[/bold] terms in {time.time() - start_time:.2f} seconds[/green]")
    console.print(f"Index written to [cyan]{output_file}[/cyan]")


def run_search(args, config) -> None:
    stop_words = build_stopwords(args.stopwords, config["preprocessing"]["encoding"]) if args.stopwords else set()
    indexer = InvertedIndexBuilder(config=config, stop_words=stop_words)
    engine = TFIDFSearchEngine.from_index_dir(args.index_dir, config=config, indexer=indexer)

    query = " ".join(args.query)
    console.print(f"Executing search: [cyan]'{query}'[/cyan]")
    query_vector = engine.create_query_vector(indexer.tokenise_query(query))

    if args.feedback:
        weights = config["relevance_feedback"]
        run_feedback_loop(engine, query_vector, args.k, ConsoleFeedbackPrompt(),
                          relevant_weight=weights["relevant_weight"],
                          non_relevant_weight=weights["non_relevant_weight"])
    else:
        display_results(engine.rank(query_vector, args.k))


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a number")
    if number < 1:
        raise argparse.ArgumentTypeError(f"{number} must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ranked-retriever',
        description='RankedRetriever - TF-IDF vector space search with relevance feedback'
    )
    parser.add_argument('--config', help='Path to configuration file')
    parser.add_argument('--verbose', action='store_true', help='Show debug information')
    subparsers = parser.add_subparsers(dest='command', required=True)

    index_parser = subparsers.add_parser('index', help='Index a collection of documents')
    index_parser.add_argument('collection', help='Directory containing the documents')
    index_parser.add_argument('index_dir', help='Directory to write index.txt to')
    index_parser.add_argument('stopwords', nargs='?', default=DEFAULT_STOPWORDS_FILE,
                              help='Path to the stopwords file (default: the bundled English list)')
    index_parser.set_defaults(handler=run_index)

    search_parser = subparsers.add_parser('search', help='Search an index')
    search_parser.add_argument('index_dir', help='Directory containing index.txt')
    search_parser.add_argument('k', type=positive_int, help='Number of results to show')
    search_parser.add_argument('query', nargs='+', help='Query text')
    search_parser.add_argument('--feedback', action='store_true',
                               help='Refine the results with relevance feedback')
    search_parser.add_argument('--stopwords', help='Stopwords file for the query')
    search_parser.set_defaults(handler=run_search)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)]
    )

    try:
        config = load_config(args.config)
        args.handler(args, config)
    except (RetrieverError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
