# accounts/permission_defaults.py

_VIEW = {
    "company.view",
    "accounts.view",
    "transactions.view",
    "investments.view",
    "credits.view",
    "recurring.view",
    "cashbox.view",
    "aging.view",
    "forecasts.view",
    "reports.view",
}

ROLE_DEFAULTS = {
    "OWNER": _VIEW | {
        # Company / security
        "company.manage_users",

        # Bank accounts & transactions
        "accounts.manage",
        "transactions.manage",
        "investments.manage",
        "credits.manage",
        "recurring.manage",
        "recurring.process",

        # Cashbox
        "cashbox.manage",
        "cashbox.transfer",

        # Aging, forecasting, reports
        "aging.manage",
        "forecasts.run",
        "reports.export",
        "audit.view",
    },
    "ADMIN": _VIEW | {
        "company.manage_users",

        "accounts.manage",
        "transactions.manage",
        "investments.manage",
        "credits.manage",
        "recurring.manage",
        "recurring.process",

        "cashbox.manage",
        "cashbox.transfer",

        "aging.manage",
        "forecasts.run",
        "reports.export",
        "audit.view",
    },
    "FINANCE": _VIEW | {
        "accounts.manage",
        "transactions.manage",
        "investments.manage",
        "credits.manage",
        "recurring.manage",

        "cashbox.manage",
        "cashbox.transfer",

        "aging.manage",
        "forecasts.run",
        "reports.export",
        "audit.view",
    },
    "VIEWER": set(_VIEW),
    "AUDITOR": _VIEW | {
        "reports.export",
        "audit.view",
    },
}

PERMISSION_NAMES = {
    "company.view": "Şirket bilgilerini görüntüle",
    "company.manage_users": "Kullanıcıları yönet",
    "accounts.view": "Hesapları görüntüle",
    "accounts.manage": "Hesapları yönet",
    "transactions.view": "İşlemleri görüntüle",
    "transactions.manage": "İşlemleri yönet",
    "investments.view": "Yatırımları görüntüle",
    "investments.manage": "Yatırımları yönet",
    "credits.view": "Kredileri görüntüle",
    "credits.manage": "Kredileri yönet",
    "recurring.view": "Tekrarlayan işlemleri görüntüle",
    "recurring.manage": "Tekrarlayan işlemleri yönet",
    "recurring.process": "Tekrarlayan işlemleri çalıştır",
    "cashbox.view": "Kasaları görüntüle",
    "cashbox.manage": "Kasaları yönet",
    "cashbox.transfer": "Kasalar arası transfer",
    "aging.view": "Yaşlandırma raporlarını görüntüle",
    "aging.manage": "Yaşlandırma kayıtlarını yönet",
    "forecasts.view": "Tahminleri görüntüle",
    "forecasts.run": "Tahmin ve simülasyon çalıştır",
    "reports.view": "Raporları görüntüle",
    "reports.export": "Rapor dışa aktar",
    "audit.view": "Denetim kayıtlarını görüntüle",
}


def all_permission_codes() -> set[str]:
    codes: set[str] = set()
    for s in ROLE_DEFAULTS.values():
        codes |= set(s)
    return codes
