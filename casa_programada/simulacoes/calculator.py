"""
Reconstruction of a stored simulation into the full comparison view.
Missing or zeroed monetary fields are re-derived from fixed plan parameters.

Financing formula (Price Table): PMT = PV * r * (1+r)^n / ((1+r)^n - 1)
"""
from casa_programada.clientes.models import Client
from casa_programada.core.utils import format_iso_timestamp, to_float
from casa_programada.simulacoes.models import Simulation
from casa_programada.simulacoes.schemas import ClientView, ConsortiumView, FinancingView, SimulationView

DEFAULT_PROPERTY_VALUE = 500000.0
DEFAULT_DOWN_PAYMENT_RATIO = 0.20

CONSORTIUM_ADMIN_RATE = 28.0  # %
CONSORTIUM_TERM = 240  # months
CONSORTIUM_BID_RATIO = 0.25

FINANCING_MONTHLY_RATE = 0.009
FINANCING_ANNUAL_RATE = 11.49  # %
DEFAULT_FINANCING_TERM = 420  # months

DEFAULT_CLIENT_INCOME = 8000.0


def consortium_installment(card_value: float) -> float:
    """Flat consortium installment: card value plus administrative fee, spread over the term."""
    return (card_value * (1 + CONSORTIUM_ADMIN_RATE / 100)) / CONSORTIUM_TERM


def financing_installment(principal: float, term: int, monthly_rate: float = FINANCING_MONTHLY_RATE) -> float:
    """Fixed monthly payment that amortizes principal over term months."""
    if monthly_rate == 0:
        return principal / term

    factor = (1 + monthly_rate) ** term
    return principal * monthly_rate * factor / (factor - 1)


def rebuild_simulation(simulation: Simulation, client: Client) -> SimulationView:
    """
    Builds the denormalized view of a stored simulation.

    Property value, down payment and financed amount fall back to defaults
    when falsy; installments and the consortium total are derived only when
    the stored value is not positive. The financing total is always
    recalculated, down payment included.
    """
    property_value = to_float(simulation.property_value) or DEFAULT_PROPERTY_VALUE
    down_payment = to_float(simulation.down_payment) or property_value * DEFAULT_DOWN_PAYMENT_RATIO
    financed_amount = to_float(simulation.financed_amount) or (property_value - down_payment)

    card_value = property_value
    term = simulation.term or DEFAULT_FINANCING_TERM

    stored_consortium_installment = to_float(simulation.consortium_installment)
    consortium_payment = stored_consortium_installment
    if consortium_payment <= 0:
        consortium_payment = consortium_installment(card_value)

    # Installment after the bid is accepted
    reduced_installment = stored_consortium_installment / 2 or consortium_payment / 2

    financing_payment = to_float(simulation.financing_installment)
    if financing_payment <= 0:
        financing_payment = financing_installment(financed_amount, term)

    financing_total = (financing_payment * term) + down_payment

    consortium_total = to_float(simulation.consortium_total)
    if consortium_total <= 0:
        consortium_total = consortium_payment * CONSORTIUM_TERM

    total_savings = financing_total - consortium_total
    savings_percentage = (total_savings / financing_total) * 100 if financing_total else 0.0

    return SimulationView(
        id=simulation.id,
        property_value=property_value,
        down_payment=down_payment,
        financed_amount=financed_amount,
        term=term,
        financing_installment=financing_payment,
        consortium_installment=consortium_payment,
        financing_total=financing_total,
        consortium_total=consortium_total,
        total_savings=total_savings,
        savings_percentage=savings_percentage,
        pdf_path=simulation.pdf_path,
        created_at=format_iso_timestamp(simulation.created_at),
        financing=FinancingView(
            credit=property_value,
            down_payment=down_payment,
            financed_amount=financed_amount,
            annual_rate=FINANCING_ANNUAL_RATE,
            term=term,
            monthly_payment=financing_payment,
            total=financing_total
        ),
        consortium=ConsortiumView(
            card_value=card_value,
            admin_rate=CONSORTIUM_ADMIN_RATE,
            installments=CONSORTIUM_TERM,
            monthly_payment=consortium_payment,
            reduced_installment=reduced_installment,
            bid=card_value * CONSORTIUM_BID_RATIO,
            total_paid=consortium_total
        ),
        client=ClientView(
            id=client.id,
            name=client.name,
            email=client.email,
            phone=client.phone,
            profession=client.profession,
            income=to_float(client.income) or DEFAULT_CLIENT_INCOME
        )
    )
