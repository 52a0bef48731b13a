"""Interactive terminal loop over a minutes session.

Same four actions as the HTTP API, driven by typed commands:

    ask <question>           question about the current sections
    adjust <instruction>     text-only adjustment (fast model)
    adjust+video <instr.>    adjustment that re-reads the video
    accept                   write the sections to the output directory
    show                     print the current sections again
    sair | exit              leave

Errors from an action are printed and the loop continues; the session keeps
its previous document.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from src.studio.errors import MinutesError
from src.studio.minutes.schemas import MinutesDocument
from src.studio.minutes.service import MinutesService
from src.studio.minutes.session import SessionStore

EXIT_COMMANDS = {"sair", "exit", "quit"}
RULE = "─" * 60

HELP_TEXT = (
    "Comandos: ask <pergunta> | adjust <ajuste> | adjust+video <ajuste> | "
    "accept | show | sair"
)


def format_document(document: MinutesDocument) -> str:
    """Render sections for the terminal, one numbered block per item."""
    blocks = [f"[{i:02d}]\n{item}" for i, item in enumerate(document.items)]
    if document.extra:
        blocks.append(f"[extra-pauta]\n{document.extra}")
    return f"\n{RULE}\n".join(blocks)


async def run_terminal(
    service: MinutesService,
    store: SessionStore,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> int:
    """Run the interactive loop until the user exits or input ends.

    Args:
        service: Minutes state machine.
        store: Session store; one session is created for this run.
        read_line: Prompting line reader (blocking; run in a worker thread).
        write: Output sink.

    Returns:
        Process exit code: 0 on normal exit, 1 if the initial generation failed.
    """
    session = store.create()

    async def prompt(text: str) -> str | None:
        try:
            return (await asyncio.to_thread(read_line, text)).strip()
        except EOFError:
            return None

    write(f"Vídeo atual: {session.video_url or '(nenhum)'}")
    answer = await prompt("Enter para confirmar ou digite outra URL: ")
    if answer is None:
        return 0

    write("\nGerando seções iniciais...\n")
    try:
        document = await service.start(session, answer or None)
    except MinutesError as exc:
        write(f"Erro: {exc}")
        return 1

    write(format_document(document))
    write(f"\n{HELP_TEXT}\n")

    while True:
        line = await prompt("> ")
        if line is None:
            break
        if not line:
            continue

        command, _, argument = line.partition(" ")
        command = command.lower()
        if command in EXIT_COMMANDS:
            break

        try:
            if command == "ask":
                write(f"\n{await service.ask(session, argument)}\n")
            elif command in ("adjust", "adjust+video"):
                document = await service.adjust(
                    session, argument, include_video=command == "adjust+video"
                )
                write(format_document(document))
            elif command == "accept":
                files = await service.accept(session)
                write("Arquivos gerados: " + ", ".join(files))
            elif command == "show":
                write(format_document(session.document))
            else:
                write(HELP_TEXT)
        except MinutesError as exc:
            write(f"Erro: {exc}")

    write("Até logo!")
    return 0
