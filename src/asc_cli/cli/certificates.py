"""asc certificates: signing certificate commands."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import AppStoreConnectError, UsageError, ValidationError
from ..output import normalize_format
from ..utils import CERTIFICATE_TYPES, require_value, validate_choices
from .common import (
    DeleteResult,
    ListRequest,
    build_client,
    command_errors,
    echo_result,
    limit_option,
    next_option,
    output_option,
    paginate_option,
    pretty_option,
    require_confirm,
)

certificates_app = typer.Typer(
    help="Manage signing certificates.", no_args_is_help=True
)


@certificates_app.command("list")
def list_certificates(
    certificate_type: Optional[str] = typer.Option(
        None,
        "--certificate-type",
        help="Filter by certificate type(s), comma-separated",
    ),
    limit: Optional[int] = limit_option(),
    next_url: Optional[str] = next_option(),
    paginate: bool = paginate_option(),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """List signing certificates."""
    with command_errors("certificates list"):
        request = ListRequest.from_flags(output, pretty, limit, next_url, paginate)
        types = validate_choices(
            certificate_type, CERTIFICATE_TYPES, "--certificate-type"
        )
        document = request.execute(
            lambda api, page_limit: api.list_certificates(types, page_limit)
        )
        request.echo(document)


@certificates_app.command("get")
def get_certificate(
    certificate_id: Optional[str] = typer.Option(None, "--id", help="Certificate ID"),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Get a certificate by ID."""
    with command_errors("certificates get"):
        normalize_format(output, pretty)
        certificate_id = require_value(certificate_id, "--id")
        document = build_client().get_certificate(certificate_id)
        echo_result(document, output, pretty)


@certificates_app.command("create")
def create_certificate(
    certificate_type: Optional[str] = typer.Option(
        None, "--certificate-type", help="Certificate type, e.g. IOS_DISTRIBUTION"
    ),
    csr: Optional[Path] = typer.Option(
        None, "--csr", help="Path to a certificate signing request (PEM)"
    ),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Create a certificate from a certificate signing request."""
    with command_errors("certificates create"):
        normalize_format(output, pretty)
        require_value(certificate_type, "--certificate-type")
        types = validate_choices(
            certificate_type, CERTIFICATE_TYPES, "--certificate-type"
        )
        if len(types) != 1:
            raise UsageError("--certificate-type takes a single value")
        csr_path = Path(require_value(str(csr) if csr else "", "--csr"))
        try:
            csr_content = csr_path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ValidationError(f"failed to read CSR: {e}")
        if not csr_content:
            raise ValidationError(f"CSR file is empty: {csr_path}")

        document = build_client().create_certificate(types[0], csr_content)
        if document is None:
            raise AppStoreConnectError(
                "certificate was not created (unexpected response)"
            )
        echo_result(document, output, pretty)


@certificates_app.command("revoke")
def revoke_certificate(
    certificate_id: Optional[str] = typer.Option(None, "--id", help="Certificate ID"),
    confirm: bool = typer.Option(False, "--confirm", help="Confirm revocation"),
    output: str = output_option(),
    pretty: bool = pretty_option(),
):
    """Revoke a certificate."""
    with command_errors("certificates revoke"):
        normalize_format(output, pretty)
        certificate_id = require_value(certificate_id, "--id")
        require_confirm(confirm, "revoke a certificate")
        if not build_client().revoke_certificate(certificate_id):
            raise AppStoreConnectError(
                f"certificate {certificate_id} was not revoked (unexpected response)"
            )
        echo_result(DeleteResult(certificate_id, "revoked"), output, pretty)
