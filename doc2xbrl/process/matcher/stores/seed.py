# Path: doc2xbrl/process/matcher/stores/seed.py
"""
Default Taxonomy

The reference concepts every fresh taxonomy store starts with: the core
balance sheet, income statement and cash flow lines of US-GAAP plus the
IFRS receivable/payable equivalents.
"""

from constants import Framework, StatementKind

from ..models.candidates import TaxonomyConcept


BS = StatementKind.BALANCE_SHEET
IS = StatementKind.INCOME_STATEMENT
CF = StatementKind.CASH_FLOW


DEFAULT_TAXONOMY: tuple[TaxonomyConcept, ...] = (
    # ------------------------------------------------------------------
    # Balance Sheet - Assets
    # ------------------------------------------------------------------
    TaxonomyConcept(
        concept='Cash and Cash Equivalents',
        tag='us-gaap:CashAndCashEquivalentsCarryingAmount',
        statement_kind=BS,
        description='Cash and cash equivalents including checking accounts, '
                    'savings accounts, and short-term investments',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Cash', 'Cash Equivalents', 'Cash and Short-term Investments',
                  'Liquid Assets'),
    ),
    TaxonomyConcept(
        concept='Accounts Receivable',
        tag='us-gaap:AccountsReceivableNetCurrent',
        statement_kind=BS,
        description='Net amounts due from customers for goods and services rendered',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Trade Receivables', 'AR', 'Customer Receivables'),
    ),
    TaxonomyConcept(
        concept='Inventory',
        tag='us-gaap:InventoryNet',
        sector='manufacturing',
        statement_kind=BS,
        description='Raw materials, work in process, and finished goods',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Stock', 'Goods in Inventory', 'Merchandise Inventory'),
    ),
    TaxonomyConcept(
        concept='Property, Plant and Equipment',
        tag='us-gaap:PropertyPlantAndEquipmentNet',
        statement_kind=BS,
        description='Long-term tangible assets used in operations',
        is_required=True,
        hierarchy_level=2,
        synonyms=('PPE', 'Fixed Assets', 'Capital Assets', 'Plant and Equipment'),
    ),
    TaxonomyConcept(
        concept='Total Assets',
        tag='us-gaap:Assets',
        statement_kind=BS,
        description='Total value of all assets owned by the company',
        is_required=True,
        hierarchy_level=1,
        synonyms=('Total Assets', 'All Assets'),
    ),

    # ------------------------------------------------------------------
    # Balance Sheet - Liabilities
    # ------------------------------------------------------------------
    TaxonomyConcept(
        concept='Accounts Payable',
        tag='us-gaap:AccountsPayableCurrent',
        statement_kind=BS,
        description='Amounts owed to suppliers for goods and services',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Trade Payables', 'AP', 'Supplier Payables'),
    ),
    TaxonomyConcept(
        concept='Short-term Debt',
        tag='us-gaap:ShortTermDebt',
        statement_kind=BS,
        description='Debt due within one year',
        hierarchy_level=2,
        synonyms=('Current Debt', 'Short-term Borrowings', 'Current Portion of Debt'),
    ),
    TaxonomyConcept(
        concept='Long-term Debt',
        tag='us-gaap:LongTermDebt',
        statement_kind=BS,
        description='Debt due after one year',
        hierarchy_level=2,
        synonyms=('Long-term Borrowings', 'Long-term Liabilities', 'Non-current Debt'),
    ),
    TaxonomyConcept(
        concept='Total Liabilities',
        tag='us-gaap:Liabilities',
        statement_kind=BS,
        description='Total value of all liabilities',
        is_required=True,
        hierarchy_level=1,
        synonyms=('Total Liabilities', 'All Liabilities'),
    ),

    # ------------------------------------------------------------------
    # Balance Sheet - Equity
    # ------------------------------------------------------------------
    TaxonomyConcept(
        concept='Share Capital',
        tag='us-gaap:CommonStockValue',
        statement_kind=BS,
        description='Par value of issued common stock',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Common Stock', 'Share Capital', 'Issued Capital'),
    ),
    TaxonomyConcept(
        concept='Retained Earnings',
        tag='us-gaap:RetainedEarningsAccumulatedDeficit',
        statement_kind=BS,
        description='Accumulated earnings retained in the business',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Retained Earnings', 'Accumulated Earnings', 'RE'),
    ),
    TaxonomyConcept(
        concept='Total Equity',
        tag='us-gaap:StockholdersEquity',
        statement_kind=BS,
        description="Total shareholders' equity",
        is_required=True,
        hierarchy_level=1,
        synonyms=('Shareholders Equity', "Owner's Equity", 'Net Worth'),
    ),

    # ------------------------------------------------------------------
    # Income Statement
    # ------------------------------------------------------------------
    TaxonomyConcept(
        concept='Revenue',
        tag='us-gaap:Revenues',
        statement_kind=IS,
        description='Total revenue from primary business operations',
        is_required=True,
        hierarchy_level=1,
        synonyms=('Sales', 'Turnover', 'Total Revenue', 'Gross Sales'),
    ),
    TaxonomyConcept(
        concept='Cost of Goods Sold',
        tag='us-gaap:CostOfGoodsSold',
        sector='manufacturing',
        statement_kind=IS,
        description='Direct costs of producing goods sold',
        is_required=True,
        hierarchy_level=2,
        synonyms=('COGS', 'Cost of Sales', 'Cost of Revenue'),
    ),
    TaxonomyConcept(
        concept='Gross Profit',
        tag='us-gaap:GrossProfit',
        statement_kind=IS,
        description='Revenue minus cost of goods sold',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Gross Margin', 'Gross Income'),
    ),
    TaxonomyConcept(
        concept='Operating Expenses',
        tag='us-gaap:OperatingExpenses',
        statement_kind=IS,
        description='Total operating expenses',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Operating Costs', 'SG&A', 'Selling, General and Administrative'),
    ),
    TaxonomyConcept(
        concept='Operating Income',
        tag='us-gaap:OperatingIncomeLoss',
        statement_kind=IS,
        description='Gross profit minus operating expenses',
        is_required=True,
        hierarchy_level=2,
        synonyms=('EBIT', 'Operating Profit', 'Operating Earnings'),
    ),
    TaxonomyConcept(
        concept='Net Income',
        tag='us-gaap:NetIncomeLoss',
        statement_kind=IS,
        description='Net profit after all expenses and taxes',
        is_required=True,
        hierarchy_level=1,
        synonyms=('Net Profit', 'Net Earnings', 'Bottom Line', 'Profit after Tax'),
    ),

    # ------------------------------------------------------------------
    # Cash Flow Statement
    # ------------------------------------------------------------------
    TaxonomyConcept(
        concept='Operating Cash Flow',
        tag='us-gaap:NetCashProvidedByUsedInOperatingActivities',
        statement_kind=CF,
        description='Cash generated from operating activities',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Cash from Operations', 'Operating Cash Flow', 'OCF'),
    ),
    TaxonomyConcept(
        concept='Investing Cash Flow',
        tag='us-gaap:NetCashProvidedByUsedInInvestingActivities',
        statement_kind=CF,
        description='Cash used for investing activities',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Cash from Investing', 'Investing Activities Cash Flow'),
    ),
    TaxonomyConcept(
        concept='Financing Cash Flow',
        tag='us-gaap:NetCashProvidedByUsedInFinancingActivities',
        statement_kind=CF,
        description='Cash used for financing activities',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Cash from Financing', 'Financing Activities Cash Flow'),
    ),
    TaxonomyConcept(
        concept='Free Cash Flow',
        tag='us-gaap:CashFlowFromContinuingOperations',
        statement_kind=CF,
        description='Operating cash flow minus capital expenditures',
        hierarchy_level=2,
        synonyms=('FCF', 'Free Cash', 'Available Cash Flow'),
    ),

    # ------------------------------------------------------------------
    # IFRS equivalents
    # ------------------------------------------------------------------
    TaxonomyConcept(
        concept='Trade Receivables',
        tag='ifrs-full:TradeAndOtherCurrentReceivables',
        statement_kind=BS,
        framework=Framework.IFRS,
        description='Receivables from trade operations under IFRS',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Accounts Receivable', 'Trade Receivables'),
    ),
    TaxonomyConcept(
        concept='Trade Payables',
        tag='ifrs-full:TradeAndOtherCurrentPayables',
        statement_kind=BS,
        framework=Framework.IFRS,
        description='Payables to suppliers under IFRS',
        is_required=True,
        hierarchy_level=2,
        synonyms=('Accounts Payable', 'Trade Creditors'),
    ),
)


__all__ = ['DEFAULT_TAXONOMY']
