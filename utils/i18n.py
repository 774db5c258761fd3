# utils/i18n.py

"""Internationalization support."""
import locale


class Translator:
    """Simple translation system for multilingual support."""

    def __init__(self):
        self.current_lang = 'en'
        self.translations = {
            'en': {
                # Listing
                'version_number': 'Version number: {}',
                'creation_date': 'Creation date: {}',
                'mountpoint': 'Mountpoint: {}',
                'list_total': 'Total {} file(s), {}',

                # Extraction
                'extracting': 'Extracting',
                'extract_failed': 'Cannot extract file: {} ({})',
                'extract_summary': 'Extracted {} file(s), {} failed.',

                # Creation
                'creating_package': 'Creating package {}',
                'pack_version': 'Pack version: {}',
                'file_count': 'Number of files: {}',
                'adding': 'Adding',
                'create_complete': 'Package written: {} ({})',

                # Errors
                'error': 'Error',
                'open_failed': 'ERROR: Cannot open packfile: {}',
                'collect_failed': 'ERROR: Failed to collect file list: {}',
                'add_failed': 'ERROR: Cannot add file: {}',
                'commit_failed': 'ERROR: Cannot write package header: {}',
                'invalid_version': 'ERROR: Version must be between 0 and 4294967295, got {}',
                'no_command': 'Error: Expected a command (list, extract or create).',
            },

            'de': {
                # Listing
                'version_number': 'Versionsnummer: {}',
                'creation_date': 'Erstellt am: {}',
                'mountpoint': 'Einhängepunkt: {}',
                'list_total': 'Insgesamt {} Datei(en), {}',

                # Extraction
                'extracting': 'Entpacke',
                'extract_failed': 'Datei kann nicht entpackt werden: {} ({})',
                'extract_summary': '{} Datei(en) entpackt, {} fehlgeschlagen.',

                # Creation
                'creating_package': 'Erstelle Paket {}',
                'pack_version': 'Paketversion: {}',
                'file_count': 'Anzahl der Dateien: {}',
                'adding': 'Füge hinzu',
                'create_complete': 'Paket geschrieben: {} ({})',

                # Errors
                'error': 'Fehler',
                'open_failed': 'FEHLER: Paketdatei kann nicht geöffnet werden: {}',
                'collect_failed': 'FEHLER: Dateiliste konnte nicht erstellt werden: {}',
                'add_failed': 'FEHLER: Datei kann nicht hinzugefügt werden: {}',
                'commit_failed': 'FEHLER: Paket-Header kann nicht geschrieben werden: {}',
                'invalid_version': 'FEHLER: Version muss zwischen 0 und 4294967295 liegen, nicht {}',
                'no_command': 'Fehler: Befehl erwartet (list, extract oder create).',
            }
        }

        # Auto-detect system language
        try:
            system_lang = locale.getlocale()[0]
            if system_lang and system_lang.startswith('de'):
                self.current_lang = 'de'
        except ValueError:
            pass

    def set_language(self, lang_code: str):
        """Set the current language."""
        if lang_code in self.translations:
            self.current_lang = lang_code

    def get(self, key: str, *args) -> str:
        """Get translated string, with optional formatting."""
        text = self.translations[self.current_lang].get(key, key)
        if args:
            try:
                return text.format(*args)
            except (IndexError, KeyError):
                return text
        return text


# Global translator instance
translator = Translator()
