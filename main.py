from pathlib import Path
from typing import Optional

import typer

from config.logging_setup import configure_logging
from config.settings import PortalConfig, PostgresConfig
from registration.client import RegistryClient
from registration.fields import CHEQUE_SLOT
from registration.graph import RegistrationGraphFactory
from registration.state import UploadedFile
from registration.submission import SubmissionCoordinator
from registration.validator import RegistrationValidator

app = typer.Typer(name="college-portal", help="College registration portal", no_args_is_help=True)

DEMO_PATCHES = [
    {
        "edits": {
            "collegeName": "Green Valley Institute of Technology",
            "establishedYear": "1995",
            "address": "12 Lake Road, Kottayam, Kerala 686001",
            "email": "admissions@gvit.edu.in",
            "phone": "+91 9876543210",
            "representativeName": "Anita Menon",
            "representativePhone": "9876500001",
            "representativeEmail": "rep@gvit.edu.in",
        },
        "action": "next",
    },
    {
        "edits": {
            "coordinatorName": "Rahul Nair",
            "coordinatorDesignation": "Dean of Students",
            "coordinatorPhone": "9876500002",
            "coordinatorEmail": "dean@gvit.edu.in",
            "feeConcession": "50% tuition waiver for scholarship students",
            "bankName": "State Bank of India",
            "accountNumber": "12345678901",
            "confirmAccountNumber": "12345678901",
            "ifscCode": "SBIN0001234",
        },
    },
    {"action": "submit"},
]


@app.command("serve")
def cmd_serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default REGISTRY_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (default REGISTRY_PORT)"),
) -> None:
    """Run the mock college registry."""
    import uvicorn

    from registry.app import create_app

    config = PortalConfig.from_env()
    logger = configure_logging(config.env, config.log_level)
    bind_host = host or config.registry_host
    bind_port = port or config.registry_port
    logger.info("registry_starting", url=f"http://{bind_host}:{bind_port}")

    uvicorn.run(create_app(max_upload_bytes=config.max_upload_bytes), host=bind_host, port=bind_port)


@app.command("demo")
def cmd_demo(
    cheque: Path = typer.Argument(..., exists=True, dir_okay=False, help="Cancelled cheque scan to attach"),
    draft_id: str = typer.Option("reg_demo_1", help="Draft id (checkpoint thread id)"),
) -> None:
    """Fill, navigate and submit a registration draft against REGISTRY_URL."""
    config = PortalConfig.from_env()
    configure_logging(config.env, config.log_level)

    validator = RegistrationValidator(max_file_bytes=config.max_upload_bytes)
    client = RegistryClient.from_config(config)
    factory = RegistrationGraphFactory(validator, SubmissionCoordinator(client, validator))

    graph_config = {"configurable": {"thread_id": draft_id}}
    patches = list(DEMO_PATCHES)
    patches[1] = {**patches[1], "uploads": {CHEQUE_SLOT: [UploadedFile.from_path(cheque)]}}

    conn = None
    if PostgresConfig.is_configured():
        import psycopg

        from persistence.encrypted_postgres_saver import SealedDraftPostgresSaver

        pg = PostgresConfig.from_env()
        conn = psycopg.connect(**pg.connect_kwargs(), autocommit=True)
        checkpointer = SealedDraftPostgresSaver(conn)
        checkpointer.setup()
    else:
        from langgraph.checkpoint.memory import InMemorySaver

        checkpointer = InMemorySaver()

    try:
        graph = factory.compile(checkpointer=checkpointer)

        for i, patch in enumerate(patches, 1):
            graph.invoke(patch, graph_config)
            snapshot = graph.get_state(graph_config).values
            typer.echo(f"\nINVOKE #{i}: section={snapshot['current_section']}")
            errors = {**snapshot.get("local_errors", {}), **snapshot.get("remote_errors", {})}
            if errors:
                typer.echo(f"  errors: {errors}")

        final = graph.get_state(graph_config).values
        if final.get("receipt"):
            typer.echo(f"\nRegistered: {final['receipt']}")
        else:
            typer.echo(f"\nNot registered. notice={final.get('notice')} missing={final.get('missing_fields')}")

        hist = list(graph.get_state_history(graph_config))
        typer.echo(f"Checkpoint count for thread_id={draft_id}: {len(hist)}")
    finally:
        client.close()
        if conn is not None:
            conn.close()


if __name__ == "__main__":
    app()
