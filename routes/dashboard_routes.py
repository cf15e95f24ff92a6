from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, current_app, jsonify

from services.credit_economics import financial_summary, operation_costs_brl
from services.external_costs import cost_and_exchange_snapshot
from services.ledger import TransactionStatus
from services.money import money_to_float
from services.permissions import require_admin
from services.providers import exchange_rate_provider, ledger, operation_costs
from services.serializers import sample_to_dict
from services.subscribers import list_subscribers, summarize

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")


@dashboard_bp.get("/dashboard/summary")
@require_admin
def summary():
    subscribers = list_subscribers()
    users = summarize(subscribers)

    transactions = ledger().list_all()
    by_status = {s.value: 0 for s in TransactionStatus}
    revenue = Decimal(0)
    for txn in transactions:
        by_status[txn.status.value] += 1
        if txn.status is TransactionStatus.COMPLETED:
            revenue += txn.amount

    # Custo: infraestrutura do mês + chamadas Gemini já consumidas
    snapshot = cost_and_exchange_snapshot(exchange_rate_provider(), current_app.config)
    per_op = operation_costs_brl(operation_costs(), snapshot.exchange_rate.rate)
    analyses = sum(s.analyses or 0 for s in subscribers)
    searches = sum(s.searches or 0 for s in subscribers)
    ai_cost = per_op["analysis"] * analyses + per_op["search"] * searches
    total_costs = snapshot.cloud_cost_brl + ai_cost

    fin = financial_summary(revenue, total_costs)
    return jsonify(
        {
            "users": {
                "total": users.total,
                "active": users.active,
                "totalCredits": users.total_credits,
                "lowCreditActive": users.low_credit_active,
                "manualActivation": users.manual_activation,
            },
            "operations": {"analyses": analyses, "searches": searches},
            "transactions": {"total": len(transactions), "byStatus": by_status},
            "financial": {
                "revenue": money_to_float(fin.revenue),
                "cloudCost": money_to_float(snapshot.cloud_cost_brl),
                "aiCost": money_to_float(ai_cost),
                "costs": money_to_float(fin.costs),
                "netProfit": money_to_float(fin.net_profit),
                "marginPct": money_to_float(fin.margin_pct, 1),
            },
            "exchangeRate": sample_to_dict(snapshot.exchange_rate),
        }
    )
