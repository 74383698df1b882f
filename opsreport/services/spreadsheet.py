"""
Spreadsheet rendering for report runs.

One workbook per run with three sheets:
- Produção: full production of the period, one row per proposal
- Sinistros: claims of the period
- Assistências Urgentes: urgent assistance tickets of the period

Rows are flattened from the nested upstream records (broker, insured,
insurer, line of business) with pandas and written through openpyxl, which
also styles the header row and sets column widths.
"""

import logging
import re
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

import pandas as pd
from openpyxl.styles import Font, PatternFill

from opsreport.core.config import get_settings
from opsreport.models.schemas import ArtifactHandle, Record

logger = logging.getLogger(__name__)


HEADER_FILL_COLOR = "FF4A04A5"
HEADER_FONT_COLOR = "FFFFFFFF"

PRODUCTION_SHEET = "Produção"
CLAIMS_SHEET = "Sinistros"
TICKETS_SHEET = "Assistências Urgentes"

# (header, width, value extractor)
Column = Tuple[str, int, Callable[[Record], Any]]


def nested(record: Record, *path) -> Any:
    """
    Walk dict keys and list indexes, returning None when any step is missing.

    Example:
        nested(item, 'corretores', 0, 'nome')
    """
    value: Any = record
    for step in path:
        if isinstance(step, int):
            if not isinstance(value, list) or len(value) <= step:
                return None
            value = value[step]
        else:
            if not isinstance(value, dict):
                return None
            value = value.get(step)
        if value is None:
            return None
    return value


def _text(*path) -> Callable[[Record], Any]:
    """Extractor rendering missing or falsy values as an empty cell."""
    return lambda record: nested(record, *path) or ""


def _value(*path) -> Callable[[Record], Any]:
    """Extractor rendering missing or falsy values as a blank (None) cell."""
    return lambda record: nested(record, *path) or None


PRODUCTION_COLUMNS: List[Column] = [
    ("ID Proposta", 15, _text('propostaId')),
    ("Data Vigência Inicial", 20, _text('dataVigenciaInicial')),
    ("Data Vigência Final", 20, _text('dataVigenciaFinal')),
    ("Data Emitida", 20, _text('dataEmitida')),
    ("Nível", 15, _text('nivelLabel')),
    ("Tipo", 20, _text('tipoLabel')),
    ("Status", 20, _text('statusLabel')),
    ("Comissão", 15, _text('comissao')),
    ("Prêmio Líquido", 18, _text('premioLiquido')),
    ("Prêmio Total", 18, _text('premioTotal')),
    ("Parcelas", 10, _text('parcelas')),
    ("Nome Corretor", 30, _text('corretores', 0, 'nome')),
    ("Nome Segurado", 30, _text('segurado', 'nome')),
    ("Tipo Pessoa", 15, _text('segurado', 'tipoPessoaLabel')),
    ("Sexo Segurado", 15, _text('segurado', 'sexoLabel')),
    ("Ramo", 20, _text('ramo', 'nome')),
    ("Seguradora", 30, _text('companhia', 'nome')),
]

CLAIMS_COLUMNS: List[Column] = [
    ("ID Sinistro", 15, _value('sinistroId')),
    ("Valor Indenizado", 18, _value('valorIndenizado')),
    ("Data Aviso", 20, _value('dataAviso')),
    ("Data Sinistro", 20, _value('dataSinistro')),
    ("Data Vistoria", 20, _value('dataVistoria')),
    ("Data Pagamento", 20, _value('dataPagamento')),
    ("Data Autorização Reparos", 25, _value('dataAutorizacaoReparos')),
    ("Data Envio NF", 20, _value('dataEnvioNF')),
    ("Data Documentação", 22, _value('dataDocumentacao')),
    ("Corretor", 30, _value('proposta', 'corretores', 0, 'nome')),
    ("Seguradora", 30, _value('companhia', 'nome')),
    ("Segurado", 35, _value('proposta', 'segurado', 'nome')),
    ("CPF/CNPJ", 18, _value('proposta', 'segurado', 'cpf_cnpj')),
    ("Status", 20, _value('statusSinistro', 'nome')),
    ("Ramo", 20, _value('proposta', 'ramo', 'nome')),
    ("Produtor", 30, _value('proposta', 'repasses', 0, 'produtor', 'nome')),
    ("Tipo", 25, _value('tipo', 'nome')),
]

TICKET_COLUMNS: List[Column] = [
    ("ID", 12, _text('id')),
    ("Título", 50, _text('titulo')),
    ("Solicitante", 30, _text('solicitante', 'nome')),
    ("Responsável", 30, _text('responsavel', 'nome')),
    ("Unidade", 25, _text('unidade', 'nome')),
    ("Departamento", 25, _text('departamento', 'nome')),
    ("Data Abertura", 20, _text('aberto')),
    ("Situação", 15, _text('situacao')),
    ("Primeira Interação", 20, _text('primeiraInteracao')),
    ("Última Alteração", 20, _text('ultimaAlteracao')),
]


def build_frame(records: Sequence[Record], columns: Sequence[Column]) -> pd.DataFrame:
    """Flatten records into a DataFrame with one column per sheet header."""
    headers = [header for header, _, _ in columns]
    rows = [[extract(record) for _, _, extract in columns] for record in records]
    return pd.DataFrame(rows, columns=headers)


def artifact_file_name(period_label: str) -> str:
    """`relatorio_completo_<label>.xlsx` with slashes and whitespace replaced by '_'."""
    safe_label = re.sub(r"[/\s]", "_", period_label)
    return f"relatorio_completo_{safe_label}.xlsx"


def _style_sheet(worksheet, columns: Sequence[Column]) -> None:
    header_font = Font(bold=True, color=HEADER_FONT_COLOR)
    header_fill = PatternFill(
        fill_type="solid", start_color=HEADER_FILL_COLOR, end_color=HEADER_FILL_COLOR
    )
    for index, (_, width, _) in enumerate(columns, start=1):
        cell = worksheet.cell(row=1, column=index)
        cell.font = header_font
        cell.fill = header_fill
        worksheet.column_dimensions[cell.column_letter].width = width


def render_spreadsheet(
    production: Sequence[Record],
    claims: Sequence[Record],
    tickets: Sequence[Record],
    period_label: str,
    output_dir: Optional[Path] = None,
) -> ArtifactHandle:
    """
    Write the three-sheet workbook for a period.

    Args:
        production: Full production of the period.
        claims: Claims of the period.
        tickets: Urgent assistance tickets of the period.
        period_label: Period label, used in the file name.
        output_dir: Target directory (default: settings.report_output_dir).

    Returns:
        ArtifactHandle pointing at the written file.
    """
    output_dir = Path(output_dir) if output_dir is not None else get_settings().report_output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    file_name = artifact_file_name(period_label)
    file_path = output_dir / file_name

    sheets = [
        (PRODUCTION_SHEET, production, PRODUCTION_COLUMNS),
        (CLAIMS_SHEET, claims, CLAIMS_COLUMNS),
        (TICKETS_SHEET, tickets, TICKET_COLUMNS),
    ]

    with pd.ExcelWriter(file_path, engine="openpyxl") as writer:
        for sheet_name, records, columns in sheets:
            frame = build_frame(records, columns)
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
            _style_sheet(writer.sheets[sheet_name], columns)

    logger.info(
        f"Spreadsheet {file_name}: {len(production)} production, "
        f"{len(claims)} claims, {len(tickets)} tickets"
    )
    return ArtifactHandle(file_path=file_path, file_name=file_name)
