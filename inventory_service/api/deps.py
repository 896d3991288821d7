from fastapi import Request

from inventory_service.services.purchase_workflow import PurchaseWorkflow
from inventory_service.services.stock_ledger import StockLedger


def get_stock_ledger(request: Request) -> StockLedger:
    return request.app.state.stock_ledger


def get_purchase_workflow(request: Request) -> PurchaseWorkflow:
    return request.app.state.purchase_workflow
