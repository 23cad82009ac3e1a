"""
Exportable datasets: localized column definitions plus row builders.

Each dataset maps to (columns by locale, row preparation, title,
filename stem, required view permission).
"""
from datetime import date

from django.utils import timezone

from accounting.models import Account
from accounting.queries import filter_transactions
from aging.models import ArApItem
from cashbox.models import CashboxTransaction


def _columns(layout: list[tuple], locale: str) -> list[dict]:
    """Resolve (key, tr header, en header, width, kind) tuples for one locale."""
    columns = []
    for key, tr, en, width, kind in layout:
        column = {'key': key, 'header': tr if locale == 'tr-TR' else en, 'width': width}
        if kind:
            column['kind'] = kind
            column['numeric'] = kind == 'money'
        columns.append(column)
    return columns


# =============================================================================
# Accounts
# =============================================================================

ACCOUNT_COLUMNS = [
    ('id', 'ID', 'ID', 8, None),
    ('bank_name', 'Banka Adı', 'Bank Name', 20, None),
    ('name', 'Hesap Adı', 'Account Name', 25, None),
    ('account_type', 'Tip', 'Type', 14, None),
    ('balance', 'Bakiye', 'Balance', 16, 'money'),
    ('currency', 'Para Birimi', 'Currency', 10, None),
    ('created_at', 'Oluşturma Tarihi', 'Created Date', 14, 'date'),
]


def prepare_account_export_data(company, params: dict) -> list[dict]:
    accounts = Account.objects.filter(company=company, is_deleted=False).order_by('bank_name', 'name')
    return [
        {
            'id': account.id,
            'bank_name': account.bank_name,
            'name': account.name,
            'account_type': account.account_type,
            'balance': account.balance,
            'currency': account.currency,
            'created_at': account.created_at,
        }
        for account in accounts
    ]


# =============================================================================
# Transactions
# =============================================================================

TRANSACTION_COLUMNS = [
    ('id', 'ID', 'ID', 8, None),
    ('account_name', 'Hesap', 'Account', 22, None),
    ('amount', 'Tutar', 'Amount', 16, 'money'),
    ('description', 'Açıklama', 'Description', 35, None),
    ('category', 'Kategori', 'Category', 15, None),
    ('date', 'Tarih', 'Date', 12, 'date'),
    ('transaction_type', 'Tip', 'Type', 12, None),
]


def prepare_transaction_export_data(company, params: dict) -> list[dict]:
    return [
        {
            'id': txn.id,
            'account_name': txn.account.name,
            'amount': txn.amount,
            'currency': txn.account.currency,
            'description': txn.description,
            'category': txn.category,
            'date': txn.date,
            'transaction_type': txn.transaction_type,
        }
        for txn in filter_transactions(company, params)
    ]


# =============================================================================
# Cashbox Transactions
# =============================================================================

CASHBOX_TRANSACTION_COLUMNS = [
    ('id', 'ID', 'ID', 8, None),
    ('cashbox_name', 'Kasa', 'Cashbox', 20, None),
    ('transaction_type', 'Tip', 'Type', 12, None),
    ('amount', 'Tutar', 'Amount', 16, 'money'),
    ('balance_after', 'İşlem Sonrası Bakiye', 'Balance After', 18, 'money'),
    ('description', 'Açıklama', 'Description', 30, None),
    ('reference', 'Referans', 'Reference', 14, None),
    ('created_at', 'Tarih', 'Date', 18, 'datetime'),
]


def prepare_cashbox_transaction_export_data(company, params: dict) -> list[dict]:
    qs = CashboxTransaction.objects.filter(
        company=company, cashbox__is_deleted=False,
    ).select_related('cashbox')
    if params.get('cashbox_id'):
        qs = qs.filter(cashbox_id=params['cashbox_id'])
    if params.get('start_date'):
        qs = qs.filter(created_at__date__gte=params['start_date'])
    if params.get('end_date'):
        qs = qs.filter(created_at__date__lte=params['end_date'])

    return [
        {
            'id': txn.id,
            'cashbox_name': txn.cashbox.name,
            'transaction_type': txn.transaction_type,
            'amount': txn.amount,
            'balance_after': txn.balance_after,
            'currency': txn.cashbox.currency,
            'description': txn.description,
            'reference': txn.reference,
            'created_at': txn.created_at,
        }
        for txn in qs.order_by('-created_at', '-id')
    ]


# =============================================================================
# AR/AP Aging
# =============================================================================

AGING_COLUMNS = [
    ('id', 'ID', 'ID', 8, None),
    ('item_type', 'Tip', 'Type', 10, None),
    ('customer_supplier', 'Müşteri/Tedarikçi', 'Customer/Vendor', 25, None),
    ('invoice_number', 'Fatura No', 'Invoice No', 14, None),
    ('invoice_date', 'Fatura Tarihi', 'Invoice Date', 12, 'date'),
    ('due_date', 'Vade Tarihi', 'Due Date', 12, 'date'),
    ('current_amount', 'Tutar', 'Amount', 16, 'money'),
    ('aging_days', 'Gün', 'Days', 8, None),
    ('aging_bucket', 'Kova', 'Bucket', 8, None),
    ('status', 'Durum', 'Status', 12, None),
]

AGING_LABELS = {
    'tr-TR': {
        'receivable': 'Alacak',
        'payable': 'Borç',
        'outstanding': 'Beklemede',
        'overdue': 'Gecikmiş',
        'paid': 'Ödenmiş',
    },
    'en-US': {
        'receivable': 'Receivable',
        'payable': 'Payable',
        'outstanding': 'Outstanding',
        'overdue': 'Overdue',
        'paid': 'Paid',
    },
}


def prepare_aging_export_data(company, params: dict) -> list[dict]:
    labels = AGING_LABELS[params.get('locale', 'tr-TR')]
    qs = ArApItem.objects.filter(company=company)
    if params.get('item_type'):
        qs = qs.filter(item_type=params['item_type'])

    return [
        {
            'id': item.id,
            'item_type': labels[item.item_type],
            'customer_supplier': item.customer_supplier,
            'invoice_number': item.invoice_number,
            'invoice_date': item.invoice_date,
            'due_date': item.due_date,
            'current_amount': item.current_amount,
            'currency': item.currency,
            'aging_days': item.aging_days,
            'aging_bucket': item.aging_bucket,
            'status': labels[item.status],
        }
        for item in qs.order_by('-aging_days', 'id')
    ]


DATASETS = {
    'accounts': {
        'columns': ACCOUNT_COLUMNS,
        'prepare': prepare_account_export_data,
        'permission': 'accounts.view',
        'title': {'tr-TR': 'Hesaplar', 'en-US': 'Accounts'},
        'filename': {'tr-TR': 'hesaplar', 'en-US': 'accounts'},
    },
    'transactions': {
        'columns': TRANSACTION_COLUMNS,
        'prepare': prepare_transaction_export_data,
        'permission': 'transactions.view',
        'title': {'tr-TR': 'İşlemler', 'en-US': 'Transactions'},
        'filename': {'tr-TR': 'islemler', 'en-US': 'transactions'},
    },
    'cashbox-transactions': {
        'columns': CASHBOX_TRANSACTION_COLUMNS,
        'prepare': prepare_cashbox_transaction_export_data,
        'permission': 'cashbox.view',
        'title': {'tr-TR': 'Kasa Hareketleri', 'en-US': 'Cashbox Transactions'},
        'filename': {'tr-TR': 'kasa-hareketleri', 'en-US': 'cashbox-transactions'},
    },
    'aging': {
        'columns': AGING_COLUMNS,
        'prepare': prepare_aging_export_data,
        'permission': 'aging.view',
        'title': {'tr-TR': 'Yaşlandırma Raporu', 'en-US': 'Aging Report'},
        'filename': {'tr-TR': 'yaslandirma', 'en-US': 'aging'},
    },
}


def columns_for(dataset: str, locale: str) -> list[dict]:
    return _columns(DATASETS[dataset]['columns'], locale)


def export_filename(dataset: str, locale: str, today: date = None) -> str:
    today = today or timezone.localdate()
    return f"{DATASETS[dataset]['filename'][locale]}_{today.isoformat()}"
