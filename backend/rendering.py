"""
HTML rendering for the customer and admin screens.
"""

from __future__ import annotations

from html import escape
from typing import Iterable

from backend.views import CustomerData, Screen, ViewState
from shared.constants import MIN_UPDATED_ADDRESS_LENGTH
from shared.types import VerificationRecord, VerificationStatus, VerificationSummary

_PAGE = """<!doctype html>
<html lang="pt-BR">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""

_FOOTER = '<footer><p>Equipe de Logística Fleurity</p></footer>'


def _page(title: str, body: str) -> str:
    return _PAGE.format(title=escape(title), body=body)


def _hidden_customer_fields(customer: CustomerData) -> str:
    return "\n".join(
        f'<input type="hidden" name="{field}" value="{escape(value)}">'
        for field, value in (
            ("order_id", customer.order_id),
            ("name", customer.name),
            ("address", customer.address),
        )
    )


def render_customer(state: ViewState, updated_address: str = "") -> str:
    customer = state.customer or CustomerData()
    if state.submitted:
        body = (
            "<main>"
            "<h2>Confirmado!</h2>"
            "<p>Obrigada! Sua confirmação foi enviada para nosso time de logística. "
            "Agora é só aguardar seu pedido!</p>"
            f"{_FOOTER}</main>"
        )
        return _page("Confirmado!", body)

    hidden = _hidden_customer_fields(customer)
    if state.screen == Screen.CUSTOMER_EDIT:
        body = f"""<main>
<h2>Qual o endereço correto?</h2>
<p>Por favor, digite o endereço completo, incluindo CEP, número e qualquer ponto de referência.</p>
<form method="post" action="/customer">
{hidden}
<textarea name="updated_address" required minlength="{MIN_UPDATED_ADDRESS_LENGTH}"
 placeholder="Ex: Rua das Flores, 123, Apto 10, CEP 01234-000, Próximo à padaria...">{escape(updated_address)}</textarea>
<button type="submit" name="action" value="update">ATUALIZAR ENDEREÇO</button>
</form>
<form method="post" action="/customer">
{hidden}
<button type="submit" name="action" value="back">Voltar para conferência</button>
</form>
</main>"""
        return _page("Qual o endereço correto?", body)

    body = f"""<main>
<h1>Tudo certo com a entrega?</h1>
<p>Oi, <strong>{escape(customer.name)}</strong>! Queremos que seu pedido chegue rápido. Por favor, confira seu endereço:</p>
<section>
<p>Endereço do Pedido {escape(customer.order_id)}</p>
<p>{escape(customer.address)}</p>
</section>
<form method="post" action="/customer">
{hidden}
<button type="submit" name="action" value="confirm">SIM, ESTÁ CORRETO!</button>
<button type="submit" name="action" value="edit">NÃO, PRECISO ALTERAR</button>
</form>
{_FOOTER}
</main>"""
    return _page("Tudo certo com a entrega?", body)


def _status_cell(record: VerificationRecord) -> str:
    if record.status == VerificationStatus.CONFIRMED:
        return "Confirmado"
    return "Corrigir Endereço"


def _address_cell(record: VerificationRecord) -> str:
    if record.status == VerificationStatus.NEEDS_CHANGE:
        return (
            "<p>Novo Endereço Solicitado:</p>"
            f"<p><strong>{escape(record.updated_address)}</strong></p>"
        )
    return "<p>Cliente confirmou o endereço original.</p>"


def _action_cell(record: VerificationRecord, sync_path: str) -> str:
    if record.synced_with_carrier:
        return "CONFERIDO"
    return (
        f'<form method="post" action="{escape(sync_path.format(id=record.id))}">'
        '<button type="submit" title="Marcar como atualizado no sistema de frete">Atualizado no frete</button></form>'
    )


def _rows(
    records: list[VerificationRecord], loading: bool, sync_path: str
) -> Iterable[str]:
    if loading:
        yield '<tr><td colspan="4">Carregando base de dados...</td></tr>'
        return
    if not records:
        yield '<tr><td colspan="4">Nenhuma resposta encontrada.</td></tr>'
        return
    for record in records:
        css = ' class="synced"' if record.synced_with_carrier else ""
        yield (
            f'<tr id="{escape(record.id)}"{css}>'
            f"<td>{_status_cell(record)}</td>"
            f"<td>#{escape(record.order_id)}<br>{escape(record.customer_name)}</td>"
            f"<td>{_address_cell(record)}</td>"
            f"<td>{_action_cell(record, sync_path)}</td>"
            "</tr>"
        )


def render_admin(
    records: list[VerificationRecord],
    summary: VerificationSummary,
    *,
    search_term: str = "",
    loading: bool = False,
    customer_link: str = "",
    sync_path: str = "/admin/verifications/{id}/synced",
) -> str:
    """Dashboard; `records` are already filtered, `summary` covers all of them."""
    rows = "\n".join(_rows(records, loading, sync_path))
    body = f"""<main>
<header>
<p>Central de Logística</p>
<h1>Verificação de Entregas</h1>
<p>Confira as respostas das clientes antes de gerar as etiquetas.</p>
<a href="{escape(customer_link)}">Testar Link Cliente</a>
</header>
<section>
<p>Total de Respostas: <span id="total">{summary.total}</span></p>
<p>Endereços Confirmados: <span id="confirmed">{summary.confirmed}</span></p>
<p>Alterações Solicitadas: <span id="needs-change">{summary.needs_change}</span></p>
</section>
<form method="get" action="">
<input type="text" name="q" value="{escape(search_term)}" placeholder="Filtrar por nome ou pedido...">
</form>
<table>
<thead><tr><th>Status Cliente</th><th>Pedido / Cliente</th><th>Endereço de Entrega</th><th>Ações</th></tr></thead>
<tbody>
{rows}
</tbody>
</table>
</main>"""
    return _page("Verificação de Entregas", body)
