from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, TextIO
import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from .config import DictConfig
from .errors import GoyaError

if TYPE_CHECKING:
    from .features import FeatureStore
    from .lattice import Lattice


app = typer.Typer(add_completion=False)

DicdirOption = typer.Option(None, "--dicdir", "-d", envvar="GOYA_DICDIR", help="compiled dictionary dir")


def _dicdir(dicdir: Optional[Path]) -> Path:
    return dicdir if dicdir is not None else DictConfig().dicdir


def _fail(err: Exception) -> None:
    rprint(f"[red]error[/red] {err}")
    raise typer.Exit(code=1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)],
    )


@app.command("download-dict")
def download_dict(
    name: str = typer.Option("unidic-mecab", help="lindera source dictionary repository"),
    version: str = typer.Option("2.1.2", help="tag version"),
) -> None:
    from .dict.downloader import ensure_source_dictionary
    try:
        res = ensure_source_dictionary(DictConfig(name=name, version=version), force=True)
    except GoyaError as e:
        _fail(e)
    rprint(f"[green]OK[/green] installed source dictionary to: {res.installed_to}")


@app.command("compile")
def compile_cmd(
    src: Optional[Path] = typer.Argument(None, help="MeCab-format dictionary dir (default: downloaded one)"),
    dicdir: Optional[Path] = DicdirOption,
    encoding: str = typer.Option("utf-8", help="source encoding, euc-jp for ipadic"),
) -> None:
    from .dict.builder import compile_dictionary
    src_dir = src if src is not None else DictConfig().source_dir
    try:
        res = compile_dictionary(src_dir, _dicdir(dicdir), encoding=encoding, progress=True)
    except GoyaError as e:
        _fail(e)
    rprint(f"[green]OK[/green] {res.words} words ({res.surfaces} surfaces) compiled to {res.artifacts.dict_path.parent}")
    rprint(f"  da.json       {res.da_slots} slots, {res.da_bytes} bytes")
    rprint(f"  dict.json     {res.dict_bytes} bytes")
    rprint(f"  features.json {res.features_bytes} bytes")


@app.command("clean")
def clean(dicdir: Optional[Path] = DicdirOption) -> None:
    from .dictionary import DictionaryArtifacts
    artifacts = DictionaryArtifacts.from_dir(_dicdir(dicdir))
    for path in (artifacts.da_path, artifacts.dict_path, artifacts.features_path):
        if path.exists():
            path.unlink()
            rprint(f"removed {path}")


def _write_mecab(out: TextIO, lattice: Lattice, store: FeatureStore) -> None:
    for word in lattice.best_words():
        if word.is_known:
            fields = store.get(word.word_id).fields
        else:
            fields = store.unknown_features(word.word_id)
        out.write(f"{word.surface_form}\t{','.join(fields)}\n")
    out.write("EOS\n")


def _analyze(lines: Iterable[str], dicdir: Path, mode: str) -> None:
    from .dictionary import DictionaryArtifacts, load
    from .features import FeatureStore
    from .lattice import parse

    artifacts = DictionaryArtifacts.from_dir(dicdir)
    try:
        dictionary = load(artifacts)
        store = FeatureStore.load(artifacts.features_path) if mode == "parse" else None
    except GoyaError as e:
        _fail(e)
    out = sys.stdout
    for line in lines:
        line = line.rstrip("\n")
        if not line:
            continue
        try:
            lattice = parse(line, dictionary)
            if store is not None:
                _write_mecab(out, lattice, store)
            elif mode == "wakachi":
                out.write(" ".join(lattice.wakachi()) + "\n")
            else:
                out.write(lattice.as_dot())
        except GoyaError as e:
            _fail(e)
        out.flush()


@app.command("parse")
def parse_cmd(text: str, dicdir: Optional[Path] = DicdirOption) -> None:
    """mecab style: surface<TAB>features per word, then EOS"""
    _analyze([text], _dicdir(dicdir), "parse")


@app.command("wakachi")
def wakachi_cmd(text: str, dicdir: Optional[Path] = DicdirOption) -> None:
    _analyze([text], _dicdir(dicdir), "wakachi")


@app.command("dot")
def dot_cmd(text: str, dicdir: Optional[Path] = DicdirOption) -> None:
    """graphviz description of the lattice"""
    _analyze([text], _dicdir(dicdir), "dot")


@app.command("repl")
def repl(
    dicdir: Optional[Path] = DicdirOption,
    wakachi: bool = typer.Option(False, "--wakachi", "-w", help="space separated output"),
) -> None:
    """analyze stdin line by line"""
    _analyze(sys.stdin, _dicdir(dicdir), "wakachi" if wakachi else "parse")


@app.command("serve")
def serve(
    dicdir: Optional[Path] = DicdirOption,
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(8000),
) -> None:
    import uvicorn
    from .api import create_app
    uvicorn.run(create_app(_dicdir(dicdir)), host=host, port=port)


if __name__ == "__main__":
    app()
