"""
Wyjątki systemu ekspertowego.

Hierarchia:
    - ExpertSystemError: klasa bazowa wszystkich błędów projektu
    - PreconditionError: algorytm uruchomiony bez wymaganych faktów
    - RuleNotFound: indeks reguły spoza bazy wiedzy
    - FactNotFound: fakt nie istnieje w danym FactStore
    - ConfigurationError: błędna konfiguracja (brak viewera, zła wartość)
    - KnowledgeBaseError: uszkodzony plik bazy wiedzy

Odpowiedź "Unsure" podczas wnioskowania wstecz NIE jest błędem - algorytm
kończy się wynikiem ze statusem ABORTED.
"""


class ExpertSystemError(Exception):
    """Klasa bazowa dla wszystkich wyjątków systemu ekspertowego."""
    pass


class PreconditionError(ExpertSystemError):
    """Algorytm wywołany bez faktów początkowych lub celów."""
    pass


class RuleNotFound(ExpertSystemError, LookupError):
    """
    Reguła o podanym indeksie nie istnieje.

    Attributes:
        rule_id: Indeks szukanej reguły
    """

    def __init__(self, rule_id):
        super().__init__(f"Rule {rule_id} does not exist")
        self.rule_id = rule_id


class FactNotFound(ExpertSystemError, LookupError):
    """
    Fakt o podanym identyfikatorze nie istnieje w słowniku faktów.

    Attributes:
        fact_id: Identyfikator faktu
        store: Nazwa słownika (np. "initial", "asked")
    """

    def __init__(self, fact_id, store=None):
        where = f" in {store} facts" if store else ""
        super().__init__(f"Fact '{fact_id}' does not exist{where}")
        self.fact_id = fact_id
        self.store = store


class ConfigurationError(ExpertSystemError):
    """Niepoprawna konfiguracja silnika, viewera lub sesji."""
    pass


class KnowledgeBaseError(ExpertSystemError):
    """Plik bazy wiedzy nie przeszedł walidacji lub nie da się go wczytać."""
    pass
