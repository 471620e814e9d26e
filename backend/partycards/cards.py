import json

from partycards import db
from partycards.errors import ValidationError
from partycards.models import Expansion, BlackCard, WhiteCard


def load_card_packs(path):
    """Load expansions from a JSON file into the session (caller commits).

    The file holds a list of packs::

        [{"name": "Base", "black": [{"text": "...", "pick": 1}], "white": ["..."]}]

    A pack whose name already exists gets its cards appended to that expansion.
    """
    with open(path, encoding='utf-8') as fh:
        packs = json.load(fh)
    if isinstance(packs, dict):
        packs = [packs]
    return [load_card_pack(pack) for pack in packs]


def load_card_pack(pack):
    name = (pack.get('name') or '').strip()
    if not name:
        raise ValidationError('Card pack is missing a name')

    expansion = Expansion.query.filter_by(name=name).first()
    if expansion is None:
        expansion = Expansion(name=name)
        db.session.add(expansion)

    for black in pack.get('black', []):
        if isinstance(black, str):
            black = {'text': black}
        pick = int(black.get('pick', 1))
        if not 1 <= pick <= 3:
            raise ValidationError(f'Black card pick must be between 1 and 3, got {pick}', text=black.get('text'))
        db.session.add(BlackCard(text=black['text'], pick=pick, expansion=expansion))

    for white in pack.get('white', []):
        text = white['text'] if isinstance(white, dict) else white
        db.session.add(WhiteCard(text=text, expansion=expansion))

    db.session.flush()
    return expansion
