"""Internationalization for printed book strings.

Maps ISO 639-1 language codes to reader-facing strings used in exported
books. Falls back to English for unknown codes and missing keys.
"""

from __future__ import annotations

UI_STRINGS: dict[str, dict[str, str]] = {
    "en": {
        "the_end": "THE END",
        "your_choices": "Your choices:",
        "turn_to_page": "Turn to page",
        "continued_on": "Continued on page",
        "continued_from": "Continued from page",
        "page": "Page",
        "about": "About This Adventure",
        "cover_alt": "Cover art",
        "illustration_alt": "Scene illustration",
    },
    "nl": {
        "the_end": "EINDE",
        "your_choices": "Jouw keuzes:",
        "turn_to_page": "Ga naar pagina",
        "continued_on": "Vervolg op pagina",
        "continued_from": "Vervolg van pagina",
        "page": "Pagina",
        "about": "Over dit avontuur",
        "cover_alt": "Omslagillustratie",
        "illustration_alt": "Illustratie",
    },
    "de": {
        "the_end": "ENDE",
        "your_choices": "Deine Entscheidungen:",
        "turn_to_page": "Weiter auf Seite",
        "continued_on": "Fortsetzung auf Seite",
        "continued_from": "Fortsetzung von Seite",
        "page": "Seite",
        "about": "Über dieses Abenteuer",
        "cover_alt": "Titelbild",
        "illustration_alt": "Szenenillustration",
    },
    "fr": {
        "the_end": "FIN",
        "your_choices": "Vos choix :",
        "turn_to_page": "Rendez-vous page",
        "continued_on": "Suite page",
        "continued_from": "Suite de la page",
        "page": "Page",
        "about": "À propos de cette aventure",
        "cover_alt": "Illustration de couverture",
        "illustration_alt": "Illustration de la scène",
    },
    "es": {
        "the_end": "FIN",
        "your_choices": "Tus opciones:",
        "turn_to_page": "Ve a la página",
        "continued_on": "Continúa en la página",
        "continued_from": "Viene de la página",
        "page": "Página",
        "about": "Sobre esta aventura",
        "cover_alt": "Ilustración de portada",
        "illustration_alt": "Ilustración de la escena",
    },
}


def get_ui_strings(language: str) -> dict[str, str]:
    """Get reader-facing strings for a language.

    Args:
        language: ISO 639-1 language code.

    Returns:
        Full string table; keys missing for the language fall back to English.
    """
    strings = dict(UI_STRINGS["en"])
    strings.update(UI_STRINGS.get(language, {}))
    return strings
