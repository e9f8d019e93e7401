"""
Signature help handler.

Lists the signatures of the concepts declared with the statement keyword at
the cursor.  Among the concepts the parser could still be reading at the
cursor, the best match comes first: concepts with parameters left to type
before fully typed ones, then fewer parameters, then by type name.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lsprotocol import types as lsp

from rhlsp.dsl.concepts import member_description
from rhlsp.dsl.queries import ConceptSignature
from rhlsp.handlers.positions import to_line_chr
from rhlsp.text import LineChr

if TYPE_CHECKING:
    from rhlsp.document import DslDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignatureHelpResult:
    signatures: list[ConceptSignature]
    active_signature: int | None = None
    active_parameter: int | None = None


def signature_help(document: DslDocument, line_chr: LineChr) -> SignatureHelpResult | None:
    analysis = document.get_analysis(line_chr)
    if analysis.keyword_token is None or analysis.is_after_any_error_line(line_chr):
        return None

    queries = document.dsl_context.queries
    signatures = queries.signatures_of(analysis.keyword_token.value)
    by_type = {signature.concept_type: signature for signature in signatures}

    candidates = []
    for concept, active_parameter in analysis.get_valid_concepts_with_active_parameter():
        signature = by_type.get(type(concept))
        if signature is not None:
            parameter_count = len(queries.parameters_of(type(concept)))
            candidates.append((concept, active_parameter, parameter_count, signature))

    if not candidates:
        return SignatureHelpResult(signatures)

    candidates.sort(key=lambda c: (c[1] >= c[2], c[2], type(c[0]).__name__))
    ordered = [candidate[3] for candidate in candidates]
    ordered += [signature for signature in signatures if signature not in ordered]
    return SignatureHelpResult(ordered, active_signature=0, active_parameter=candidates[0][1])


def _signature_information(signature: ConceptSignature) -> lsp.SignatureInformation:
    return lsp.SignatureInformation(
        label=signature.signature,
        documentation=lsp.MarkupContent(
            kind=lsp.MarkupKind.PlainText,
            value=signature.documentation,
        ) if signature.documentation else None,
        parameters=[
            lsp.ParameterInformation(label=member_description(member))
            for member in signature.parameters
        ],
    )


def get_signature_help(document: DslDocument, position: lsp.Position) -> lsp.SignatureHelp | None:
    """Return LSP signature help for *position* in *document*, or *None*."""
    line_chr = to_line_chr(position)
    result = signature_help(document, line_chr)
    if result is None or not result.signatures:
        return None
    logger.debug('get_signature_help at %s: active signature=%s parameter=%s\n%s',
                 line_chr, result.active_signature, result.active_parameter,
                 document.text_document.show_position(line_chr))
    return lsp.SignatureHelp(
        signatures=[_signature_information(s) for s in result.signatures],
        active_signature=result.active_signature,
        active_parameter=result.active_parameter,
    )
