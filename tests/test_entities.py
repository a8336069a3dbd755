#!/usr/bin/env python3
"""
Unit tests for labdata/entities.py (records and the wire codec).

Run with:
    python -m pytest tests/test_entities.py
"""
import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from labdata.entities import (
    AppSettings, Cocktail, Quote,
    decode_cocktail, decode_drinks_envelope, encode_cocktail,
    decode_quote, encode_quote, decode_quotes, decode_quotes_page,
    decode_settings, encode_settings,
)
from labdata.errors import ClientError, DecodeError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _drink(**extra):
    raw = {
        'idDrink': '11007',
        'strDrink': 'Margarita',
        'strCategory': 'Ordinary Drink',
        'strAlcoholic': 'Alcoholic',
        'strGlass': 'Cocktail glass',
        'strInstructions': 'Rub the rim of the glass with the lime slice.',
        'strDrinkThumb': 'https://www.thecocktaildb.com/images/media/drink/5noda61589575158.jpg',
    }
    raw.update(extra)
    return raw


# ===========================================================================
# Cocktails
# ===========================================================================

class TestDecodeCocktail(unittest.TestCase):

    def test_display_fields(self):
        c = decode_cocktail(_drink())
        self.assertEqual(c.id, '11007')
        self.assertEqual(c.name, 'Margarita')
        self.assertEqual(c.category, 'Ordinary Drink')
        self.assertEqual(c.glass, 'Cocktail glass')

    def test_ingredients_keep_ascending_index_order(self):
        c = decode_cocktail(_drink(
            strIngredient1='Tequila', strMeasure1='1 1/2 oz',
            strIngredient2='Triple sec', strMeasure2='1/2 oz',
            strIngredient3='Lime juice', strMeasure3='1 oz',
            strIngredient4='Salt',
        ))
        self.assertEqual(c.ingredients, ('Tequila', 'Triple sec', 'Lime juice', 'Salt'))
        self.assertEqual(c.measures, ('1 1/2 oz', '1/2 oz', '1 oz'))

    def test_gaps_empty_and_null_values_are_skipped(self):
        c = decode_cocktail(_drink(
            strIngredient1='Gin', strMeasure1=None,
            strIngredient2='', strMeasure2='   ',
            strIngredient3=None, strMeasure3='2 oz',
            strIngredient7='Tonic', strMeasure7='Top up',
        ))
        self.assertEqual(c.ingredients, ('Gin', 'Tonic'))
        self.assertEqual(c.measures, ('2 oz', 'Top up'))

    def test_values_are_trimmed(self):
        c = decode_cocktail(_drink(strIngredient1='  Vodka \n', strMeasure1=' 2 cl '))
        self.assertEqual(c.ingredients, ('Vodka',))
        self.assertEqual(c.measures, ('2 cl',))

    def test_fields_past_ten_are_ignored(self):
        c = decode_cocktail(_drink(strIngredient10='Mint', strIngredient11='Sugar'))
        self.assertEqual(c.ingredients, ('Mint',))

    def test_more_ingredients_than_measures_pairs_safely(self):
        c = decode_cocktail(_drink(
            strIngredient1='Rum', strMeasure1='2 oz',
            strIngredient2='Cola',
        ))
        self.assertEqual(list(c.pairs()), [('Rum', '2 oz'), ('Cola', None)])

    def test_numeric_id_is_normalised_to_string(self):
        self.assertEqual(decode_cocktail(_drink(idDrink=17222)).id, '17222')

    def test_missing_id_raises(self):
        raw = _drink()
        del raw['idDrink']
        with self.assertRaises(DecodeError):
            decode_cocktail(raw)

    def test_missing_name_raises(self):
        raw = _drink()
        del raw['strDrink']
        with self.assertRaises(DecodeError):
            decode_cocktail(raw)

    def test_non_object_raises(self):
        with self.assertRaises(DecodeError):
            decode_cocktail(['not', 'an', 'object'])

    def test_decode_error_is_a_client_error(self):
        self.assertTrue(issubclass(DecodeError, ClientError))

    def test_equality_is_by_id(self):
        a = Cocktail(id='1', name='A')
        b = Cocktail(id='1', name='Renamed')
        self.assertEqual(a, b)
        self.assertEqual(len({a, b}), 1)
        self.assertNotEqual(a, Cocktail(id='2', name='A'))


class TestDrinksEnvelope(unittest.TestCase):

    def test_null_drinks_is_empty(self):
        self.assertEqual(decode_drinks_envelope({'drinks': None}), [])

    def test_missing_drinks_is_empty(self):
        self.assertEqual(decode_drinks_envelope({}), [])

    def test_list_is_decoded_in_order(self):
        drinks = decode_drinks_envelope({'drinks': [
            _drink(idDrink='1', strDrink='Margarita'),
            _drink(idDrink='2', strDrink='Blue Margarita'),
        ]})
        self.assertEqual([d.id for d in drinks], ['1', '2'])

    def test_wrong_type_raises(self):
        with self.assertRaises(DecodeError):
            decode_drinks_envelope({'drinks': 'nope'})

    def test_non_object_raises(self):
        with self.assertRaises(DecodeError):
            decode_drinks_envelope(None)


class TestEncodeCocktail(unittest.TestCase):

    def test_only_display_fields_are_emitted(self):
        c = decode_cocktail(_drink(strIngredient1='Tequila', strMeasure1='1 oz'))
        data = encode_cocktail(c)
        self.assertEqual(data['idDrink'], '11007')
        self.assertEqual(data['strDrink'], 'Margarita')
        self.assertEqual(data['strGlass'], 'Cocktail glass')
        self.assertNotIn('strIngredient1', data)
        self.assertNotIn('strMeasure1', data)

    def test_none_fields_are_omitted(self):
        data = encode_cocktail(Cocktail(id='5', name='Water'))
        self.assertEqual(data, {'idDrink': '5', 'strDrink': 'Water'})

    def test_re_decode_loses_ingredients(self):
        c = decode_cocktail(_drink(strIngredient1='Tequila'))
        again = decode_cocktail(encode_cocktail(c))
        self.assertEqual(again.ingredients, ())
        self.assertEqual(again.name, c.name)


# ===========================================================================
# Quotes
# ===========================================================================

class TestQuotes(unittest.TestCase):

    def test_decode_quote(self):
        q = decode_quote({'id': 1, 'quote': 'Life is short.', 'author': 'Anon'})
        self.assertEqual(q, Quote(1, 'Life is short.', 'Anon'))

    def test_encode_quote(self):
        self.assertEqual(encode_quote(Quote(3, 'x', 'y')),
                         {'id': 3, 'quote': 'x', 'author': 'y'})

    def test_string_id_raises(self):
        with self.assertRaises(DecodeError):
            decode_quote({'id': '1', 'quote': 'x', 'author': 'y'})

    def test_bool_id_raises(self):
        with self.assertRaises(DecodeError):
            decode_quote({'id': True, 'quote': 'x', 'author': 'y'})

    def test_missing_author_raises(self):
        with self.assertRaises(DecodeError):
            decode_quote({'id': 1, 'quote': 'x'})

    def test_quote_equality_compares_all_fields(self):
        self.assertNotEqual(Quote(1, 'a', 'b'), Quote(1, 'a', 'c'))

    def test_share_text(self):
        self.assertEqual(Quote(1, 'Be kind.', 'Someone').share_text(),
                         'Be kind.\n— Someone')

    def test_decode_quotes_array(self):
        quotes = decode_quotes([{'id': 1, 'quote': 'a', 'author': 'b'}])
        self.assertEqual(quotes, [Quote(1, 'a', 'b')])

    def test_decode_quotes_array_rejects_object(self):
        with self.assertRaises(DecodeError):
            decode_quotes({'quotes': []})

    def test_decode_page(self):
        page = decode_quotes_page({
            'quotes': [{'id': 11, 'quote': 'a', 'author': 'b'}],
            'total': 1454, 'skip': 10, 'limit': 1,
        })
        self.assertEqual(page.quotes, (Quote(11, 'a', 'b'),))
        self.assertEqual((page.total, page.skip, page.limit), (1454, 10, 1))

    def test_decode_page_without_quotes_raises(self):
        with self.assertRaises(DecodeError):
            decode_quotes_page({'total': 0, 'skip': 0, 'limit': 10})


# ===========================================================================
# Settings
# ===========================================================================

class TestSettingsCodec(unittest.TestCase):

    def test_default_is_canonical(self):
        s = AppSettings.default()
        self.assertEqual(s, AppSettings())
        self.assertEqual(s.primary_color, 'blue')
        self.assertEqual(s.background_color, 'white')
        self.assertEqual(s.font_size, 16.0)
        self.assertEqual(s.font_name, 'System')
        self.assertTrue(s.show_author_icons)
        self.assertFalse(s.dark_mode)

    def test_encode_uses_camel_case_keys(self):
        data = encode_settings(AppSettings.default())
        self.assertEqual(set(data), {'primaryColor', 'backgroundColor', 'fontSize',
                                     'fontName', 'showAuthorIcons', 'darkMode'})

    def test_round_trip(self):
        s = AppSettings(primary_color='red', font_size=20.0, dark_mode=True)
        self.assertEqual(decode_settings(encode_settings(s)), s)

    def test_missing_keys_take_defaults(self):
        s = decode_settings({'darkMode': True})
        self.assertTrue(s.dark_mode)
        self.assertEqual(s.primary_color, 'blue')

    def test_unknown_keys_ignored(self):
        self.assertEqual(decode_settings({'legacy': 1}), AppSettings.default())

    def test_integer_font_size_accepted(self):
        self.assertEqual(decode_settings({'fontSize': 18}).font_size, 18.0)

    def test_wrong_type_raises(self):
        with self.assertRaises(DecodeError):
            decode_settings({'darkMode': 'yes'})
        with self.assertRaises(DecodeError):
            decode_settings({'fontSize': True})


if __name__ == '__main__':
    unittest.main()
