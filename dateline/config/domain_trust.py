"""Static domain classification tables for search result scoring.

Host lists drive DomainScorer:
- High-trust (encyclopedias, wire services, journals, agencies): +2.0
- Historical archives and almanacs: +1.5
- Generically allowed outlets: +1.0
- Anything else: 0

Matching is containment in either direction between the result host
(``www.`` stripped) and the listed domain, so ``en.wikipedia.org`` matches
``wikipedia.org``.

EXCLUDED_DOMAINS are user-generated-content hosts passed to every search as
excluded domains.
"""

from typing import Dict, List

HIGH_TRUST_SCORE = 2.0
HISTORICAL_SCORE = 1.5
ALLOWED_SCORE = 1.0

EXCLUDED_DOMAINS: List[str] = [
    "youtube.com", "youtu.be", "dailymotion.com", "vimeo.com",
    "tiktok.com", "facebook.com", "instagram.com", "x.com", "twitter.com",
    "reddit.com", "medium.com",
]

HIGH_TRUST_DOMAINS: List[str] = [
    # Reference works
    "wikipedia.org", "en.wikipedia.org", "britannica.com",
    # Wire services and major news
    "bbc.co.uk", "bbc.com", "reuters.com", "apnews.com",
    "theguardian.com", "nytimes.com",
    # Journals
    "nature.com", "science.org", "cell.com", "thelancet.com",
    # Agencies
    "nasa.gov", "esa.int", "nih.gov", "cdc.gov", "who.int",
    # Archives with editorial control
    "jstor.org", "archive.org", "loc.gov", "todayinsci.com", "onthisday.com",
]

HISTORICAL_DOMAINS: List[str] = [
    "history.com", "historytoday.com", "britannica.com",
    "onthisday.com", "todayinsci.com", "historyofinformation.com",
    "archive.org", "loc.gov", "jstor.org",
]

ALLOWED_DOMAINS: List[str] = [
    "bbc.com", "bbc.co.uk", "reuters.com", "apnews.com", "theguardian.com",
    "cnn.com", "nytimes.com", "telegraph.co.uk", "independent.co.uk",
    "nature.com", "science.org", "sciencemag.org", "cell.com", "thelancet.com",
    "scientificamerican.com", "newscientist.com", "sciencedaily.com",
    "pnas.org", "journals.aps.org", "iopscience.iop.org",
    "nasa.gov", "esa.int", "spacex.com", "space.com", "planetary.org",
    "mit.edu", "stanford.edu", "harvard.edu", "ox.ac.uk", "cam.ac.uk",
    "nobelprize.org", "royalsociety.org", "aaas.org",
    "nih.gov", "cdc.gov", "who.int", "mayoclinic.org", "bmj.com",
    "ieee.org", "acm.org", "sciencedirect.com", "springer.com",
    "jstor.org", "archive.org", "loc.gov", "biodiversitylibrary.org",
    "historyofinformation.com", "todayinsci.com", "onthisday.com",
    "si.edu", "nhm.ac.uk", "amnh.org", "exploratorium.edu",
    "wikipedia.org", "en.wikipedia.org", "britannica.com",
    "smithsonianmag.com", "nationalgeographic.com",
]

MONTH_NAMES: List[str] = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# English month name -> forms used in English, German, French, Spanish,
# Italian and Japanese sources
MONTH_TRANSLATIONS: Dict[str, List[str]] = {
    "January": ["January", "Januar", "Janvier", "Enero", "Gennaio", "1月"],
    "February": ["February", "Februar", "Février", "Febrero", "Febbraio", "2月"],
    "March": ["March", "März", "Mars", "Marzo", "3月"],
    "April": ["April", "Avril", "Abril", "Aprile", "4月"],
    "May": ["May", "Mai", "Mayo", "Maggio", "5月"],
    "June": ["June", "Juni", "Juin", "Junio", "Giugno", "6月"],
    "July": ["July", "Juli", "Juillet", "Julio", "Luglio", "7月"],
    "August": ["August", "Août", "Agosto", "8月"],
    "September": ["September", "Septembre", "Septiembre", "Settembre", "9月"],
    "October": ["October", "Oktober", "Octobre", "Octubre", "Ottobre", "10月"],
    "November": ["November", "Novembre", "Noviembre", "11月"],
    "December": ["December", "Dezember", "Décembre", "Diciembre", "Dicembre", "12月"],
}
