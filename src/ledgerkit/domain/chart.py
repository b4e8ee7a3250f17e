"""BAS chart of accounts.

The chart is static reference data. Accounts booked on numbers that are not
listed here are still valid; ``account_for_number`` places them in an
uncategorized bucket typed by their class digit.
"""

from typing import Optional

from ledgerkit.domain.entities import Account, AccountType

UNKNOWN_ACCOUNT_NAME = "Okänt konto"
UNCATEGORIZED_GROUP = "Okategoriserat"

CLASS_LABELS: dict[int, str] = {
    1: "Tillgångar",
    2: "Eget kapital och skulder",
    3: "Rörelseintäkter",
    4: "Kostnader för varor/material",
    5: "Övriga externa kostnader",
    6: "Övriga externa kostnader",
    7: "Personalkostnader",
    8: "Finansiella poster",
}

# (number, name, type, group)
_BAS_ROWS: tuple[tuple[str, str, str, str], ...] = (
    ("1210", "Maskiner och andra tekniska anläggningar", "asset", "Maskiner och inventarier"),
    ("1220", "Inventarier och verktyg", "asset", "Maskiner och inventarier"),
    ("1240", "Bilar och andra transportmedel", "asset", "Maskiner och inventarier"),
    ("1250", "Datorer", "asset", "Maskiner och inventarier"),
    ("1410", "Lager av råvaror", "asset", "Lager"),
    ("1440", "Lager av handelsvaror", "asset", "Lager"),
    ("1510", "Kundfordringar", "asset", "Kundfordringar"),
    ("1630", "Skattefordringar", "asset", "Övriga fordringar"),
    ("1640", "Ingående moms", "asset", "Övriga fordringar"),
    ("1650", "Momsfordran", "asset", "Övriga fordringar"),
    ("1710", "Förutbetalda hyreskostnader", "asset", "Förutbetalda kostnader"),
    ("1730", "Förutbetalda försäkringspremier", "asset", "Förutbetalda kostnader"),
    ("1910", "Kassa", "asset", "Kassa och bank"),
    ("1920", "PlusGiro", "asset", "Kassa och bank"),
    ("1930", "Företagskonto", "asset", "Kassa och bank"),
    ("1950", "Bankgiro", "asset", "Kassa och bank"),
    ("2010", "Eget kapital", "equity", "Eget kapital"),
    ("2011", "Aktiekapital", "equity", "Eget kapital"),
    ("2080", "Balanserat resultat", "equity", "Eget kapital"),
    ("2090", "Årets resultat", "equity", "Eget kapital"),
    ("2330", "Checkräkningskredit", "liability", "Långfristiga skulder"),
    ("2350", "Långfristiga skulder till kreditinstitut", "liability", "Långfristiga skulder"),
    ("2420", "Förskott från kunder", "liability", "Kortfristiga skulder"),
    ("2440", "Leverantörsskulder", "liability", "Kortfristiga skulder"),
    ("2510", "Skatteskulder", "liability", "Skatteskulder"),
    ("2610", "Utgående moms, 25%", "liability", "Moms"),
    ("2611", "Utgående moms på försäljning inom Sverige, 25%", "liability", "Moms"),
    ("2614", "Utgående moms omvänd skattskyldighet, 25%", "liability", "Moms"),
    ("2615", "Utgående moms import av varor, 25%", "liability", "Moms"),
    ("2620", "Utgående moms, 12%", "liability", "Moms"),
    ("2621", "Utgående moms på försäljning inom Sverige, 12%", "liability", "Moms"),
    ("2624", "Utgående moms omvänd skattskyldighet, 12%", "liability", "Moms"),
    ("2625", "Utgående moms import av varor, 12%", "liability", "Moms"),
    ("2630", "Utgående moms, 6%", "liability", "Moms"),
    ("2631", "Utgående moms på försäljning inom Sverige, 6%", "liability", "Moms"),
    ("2634", "Utgående moms omvänd skattskyldighet, 6%", "liability", "Moms"),
    ("2635", "Utgående moms import av varor, 6%", "liability", "Moms"),
    ("2640", "Ingående moms", "liability", "Moms"),
    ("2645", "Beräknad ingående moms på förvärv från utlandet", "liability", "Moms"),
    ("2650", "Redovisningskonto för moms", "liability", "Moms"),
    ("2710", "Personalskatt", "liability", "Personalskatter"),
    ("2730", "Arbetsgivaravgifter", "liability", "Personalskatter"),
    ("2731", "Avräkning lagstadgade sociala avgifter", "liability", "Personalskatter"),
    ("2732", "Avräkning särskild löneskatt", "liability", "Personalskatter"),
    ("2740", "Skuld pensionspremier", "liability", "Personalskatter"),
    ("2790", "Övriga löneavdrag", "liability", "Personalskatter"),
    ("2910", "Upplupna löner", "liability", "Upplupna kostnader"),
    ("2920", "Upplupna semesterlöner", "liability", "Upplupna kostnader"),
    ("2930", "Upplupna sociala avgifter", "liability", "Upplupna kostnader"),
    ("3000", "Försäljning varor, 25% moms", "revenue", "Försäljning"),
    ("3001", "Försäljning varor, 12% moms", "revenue", "Försäljning"),
    ("3002", "Försäljning varor, 6% moms", "revenue", "Försäljning"),
    ("3003", "Försäljning varor, momsfri", "revenue", "Försäljning"),
    ("3010", "Försäljning tjänster, 25% moms", "revenue", "Försäljning"),
    ("3011", "Försäljning tjänster, 12% moms", "revenue", "Försäljning"),
    ("3012", "Försäljning tjänster, 6% moms", "revenue", "Försäljning"),
    ("3013", "Försäljning tjänster, momsfri", "revenue", "Försäljning"),
    ("3040", "Försäljning till EU", "revenue", "Försäljning"),
    ("3050", "Försäljning utanför EU", "revenue", "Försäljning"),
    ("3109", "Försäljning varor, mellanman vid trepartshandel", "revenue", "Försäljning"),
    ("3231", "Försäljning inom byggsektorn, omvänd skattskyldighet", "revenue", "Försäljning"),
    ("3305", "Försäljning tjänster till land utanför EU", "revenue", "Försäljning"),
    ("3308", "Försäljning tjänster till annat EU-land", "revenue", "Försäljning"),
    ("3900", "Övriga rörelseintäkter", "revenue", "Övriga intäkter"),
    ("3913", "Frivilligt momspliktiga hyresintäkter", "revenue", "Övriga intäkter"),
    ("4000", "Inköp av varor", "expense", "Inköp varor"),
    ("4010", "Inköp av varor inom Sverige", "expense", "Inköp varor"),
    ("4040", "Inköp av varor inom EU", "expense", "Inköp varor"),
    ("4050", "Inköp av varor utanför EU", "expense", "Inköp varor"),
    ("4415", "Inköpta varor i Sverige, omvänd skattskyldighet", "expense", "Inköp varor"),
    ("4425", "Inköpta tjänster i Sverige, omvänd skattskyldighet", "expense", "Inköp tjänster"),
    ("4500", "Inköp av tjänster", "expense", "Inköp tjänster"),
    ("4510", "Inköp av tjänster inom Sverige", "expense", "Inköp tjänster"),
    ("4516", "Inköp av varor, mellanman vid trepartshandel", "expense", "Inköp varor"),
    ("4531", "Inköp av tjänster inom EU", "expense", "Inköp tjänster"),
    ("4535", "Inköp av tjänster utanför EU", "expense", "Inköp tjänster"),
    ("5010", "Lokalhyra", "expense", "Lokalkostnader"),
    ("5020", "El för lokaler", "expense", "Lokalkostnader"),
    ("5250", "Hyra av datorer", "expense", "Hyra av anläggningstillgångar"),
    ("5410", "Förbrukningsinventarier", "expense", "Förbrukningsmaterial"),
    ("5420", "Programvaror", "expense", "Förbrukningsmaterial"),
    ("5460", "Förbrukningsmaterial", "expense", "Förbrukningsmaterial"),
    ("5600", "Bilkostnader", "expense", "Transport"),
    ("5610", "Personbilskostnader", "expense", "Transport"),
    ("5611", "Drivmedel", "expense", "Transport"),
    ("5615", "Leasingavgift bil", "expense", "Transport"),
    ("5800", "Resekostnader", "expense", "Resor"),
    ("5810", "Biljetter", "expense", "Resor"),
    ("5830", "Kost och logi", "expense", "Resor"),
    ("6010", "Marknadsföring", "expense", "Försäljningskostnader"),
    ("6040", "Representation", "expense", "Försäljningskostnader"),
    ("6050", "Reklamkostnader", "expense", "Försäljningskostnader"),
    ("6100", "Kontorsmaterial", "expense", "Kontorsmaterial"),
    ("6110", "Kontorsmaterial och trycksaker", "expense", "Kontorsmaterial"),
    ("6200", "Telefon och internet", "expense", "Tele och post"),
    ("6210", "Telekommunikation", "expense", "Tele och post"),
    ("6212", "Mobiltelefon", "expense", "Tele och post"),
    ("6230", "Datakommunikation", "expense", "Tele och post"),
    ("6250", "Porto", "expense", "Tele och post"),
    ("6300", "Företagsförsäkringar", "expense", "Försäkringar"),
    ("6310", "Försäkringspremier", "expense", "Försäkringar"),
    ("6420", "Revisionsarvoden", "expense", "Förvaltning"),
    ("6500", "Övriga externa tjänster", "expense", "Externa tjänster"),
    ("6530", "Redovisningstjänster", "expense", "Externa tjänster"),
    ("6540", "IT-tjänster", "expense", "Externa tjänster"),
    ("6550", "Konsultarvoden", "expense", "Externa tjänster"),
    ("6570", "Bankavgifter", "expense", "Externa tjänster"),
    ("7010", "Löner till kollektivanställda", "expense", "Löner"),
    ("7011", "Löner till tjänstemän", "expense", "Löner"),
    ("7012", "Löner till företagsledare", "expense", "Löner"),
    ("7080", "Semesterlöner", "expense", "Löner"),
    ("7081", "Förändring av semesterlöneskuld", "expense", "Löner"),
    ("7082", "Sjuklön", "expense", "Löner"),
    ("7090", "Förändring av löneskuld", "expense", "Löner"),
    ("7210", "Styrelsearvoden", "expense", "Arvoden"),
    ("7220", "Arvoden till revisorer", "expense", "Arvoden"),
    ("7300", "Traktamenten", "expense", "Ersättningar"),
    ("7310", "Skattefria traktamenten", "expense", "Ersättningar"),
    ("7320", "Skattefria bilersättningar", "expense", "Ersättningar"),
    ("7330", "Övriga skattefria ersättningar", "expense", "Ersättningar"),
    ("7350", "Skattepliktiga traktamenten", "expense", "Ersättningar"),
    ("7380", "Kostnader för förmåner", "expense", "Ersättningar"),
    ("7385", "Friskvårdsbidrag", "expense", "Ersättningar"),
    ("7410", "Pensionsförsäkringspremier", "expense", "Sociala avgifter"),
    ("7510", "Arbetsgivaravgifter", "expense", "Sociala avgifter"),
    ("7511", "Lagstadgade sociala avgifter", "expense", "Sociala avgifter"),
    ("7519", "Sociala avgifter för semester- och löneskuld", "expense", "Sociala avgifter"),
    ("7530", "Särskild löneskatt", "expense", "Sociala avgifter"),
    ("7533", "Särskild löneskatt på pensionskostnader", "expense", "Sociala avgifter"),
    ("7550", "Pensionskostnader", "expense", "Sociala avgifter"),
    ("7570", "Egenavgifter", "expense", "Sociala avgifter"),
    ("7580", "Gruppförsäkringspremier", "expense", "Sociala avgifter"),
    ("7610", "Utbildning", "expense", "Övriga personalkostnader"),
    ("7830", "Avskrivningar på maskiner och inventarier", "expense", "Avskrivningar"),
    ("7832", "Avskrivningar på inventarier", "expense", "Avskrivningar"),
    ("8310", "Ränteintäkter", "revenue", "Finansiella intäkter"),
    ("8311", "Ränteintäkter från bank", "revenue", "Finansiella intäkter"),
    ("8410", "Räntekostnader till kreditinstitut", "expense", "Finansiella kostnader"),
    ("8910", "Skatt på årets resultat", "expense", "Skatter"),
    ("8999", "Årets resultat", "equity", "Resultat"),
)


def type_for_class(account_class: int) -> AccountType:
    """Infer the account type from the class digit."""
    if account_class == 1:
        return AccountType.ASSET
    if account_class == 2:
        return AccountType.LIABILITY
    if account_class == 3:
        return AccountType.REVENUE
    return AccountType.EXPENSE


def _build_chart() -> dict[str, Account]:
    chart = {}
    for number, name, type_value, group in _BAS_ROWS:
        chart[number] = Account(
            number=number,
            name=name,
            account_class=int(number[0]),
            type=AccountType(type_value),
            group=group,
        )
    return chart


BAS_ACCOUNTS: dict[str, Account] = _build_chart()


def get_account(number: str) -> Optional[Account]:
    """Look up an account in the chart.

    Args:
        number: Four-digit account number

    Returns:
        Account or None if the number is not in the chart
    """
    return BAS_ACCOUNTS.get(number)


def account_for_number(number: str) -> Account:
    """Return the chart account, or an uncategorized placeholder for unknown numbers."""
    account = BAS_ACCOUNTS.get(number)
    if account is not None:
        return account
    account_class = int(number[0]) if number[:1].isdigit() else 0
    return Account(
        number=number,
        name=UNKNOWN_ACCOUNT_NAME,
        account_class=account_class,
        type=type_for_class(account_class),
        group=UNCATEGORIZED_GROUP,
    )


def list_accounts() -> list[Account]:
    """List the full chart sorted by account number."""
    return sorted(BAS_ACCOUNTS.values(), key=lambda acc: acc.number)


def accounts_by_class(account_class: int) -> list[Account]:
    """List chart accounts belonging to a class (1-8)."""
    return [acc for acc in list_accounts() if acc.account_class == account_class]


def matches_search(account: Account, query: str) -> bool:
    """Case-insensitive substring match on number, name and group."""
    needle = query.strip().lower()
    if not needle:
        return True
    return (
        needle in account.number
        or needle in account.name.lower()
        or needle in account.group.lower()
    )


def search_accounts(query: str) -> list[Account]:
    """Search the chart by number, name or group."""
    return [acc for acc in list_accounts() if matches_search(acc, query)]
