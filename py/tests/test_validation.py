
# RUN: python -m unittest discover -s tests
# RUN-SOME: python -m unittest discover -s tests -k format

import unittest

from modinha import (
    ValidationError,
    constraints,
    validate,
)


schema = {
    'id': {'type': 'string', 'format': 'uuid', 'uniqueId': True},
    'name': {'type': 'string', 'required': True, 'trim': True},
    'email': {'type': 'string', 'required': True, 'private': True},
    'website': {'type': 'string', 'format': 'url'},
    'anything': {'type': 'any', 'default': 'x'},
    'full': {'type': 'string', 'set': lambda target, source: None},
    'address': {
        'properties': {
            'city': {'type': 'string', 'required': True},
            'zip': {'type': 'number'},
        }
    },
}


class TestConstraints(unittest.TestCase):

    def test_constraints(self):
        self.assertEqual(constraints(schema), {
            'properties': {
                'id': {'type': 'string', 'format': 'uuid'},
                'name': {'type': 'string'},
                'email': {'type': 'string'},
                'website': {'type': 'string', 'format': 'url'},
                'anything': {},
                'full': {'type': 'string'},
                'address': {
                    'properties': {
                        'city': {'type': 'string'},
                        'zip': {'type': 'number'},
                    },
                    'required': ['city'],
                },
            },
            'required': ['name', 'email'],
        })

    def test_constraints_empty(self):
        self.assertEqual(constraints(None), {'properties': {}})


class TestValidate(unittest.TestCase):

    def test_valid(self):
        result = validate({'name': 'n', 'email': 'e', 'address': {'city': 'c'}}, schema)

        self.assertIsInstance(result, ValidationError)
        self.assertTrue(result.valid)
        self.assertEqual(result.errors, {})
        self.assertEqual(result.message, '')

    def test_required(self):
        result = validate({'name': 'n'}, schema)

        self.assertFalse(result.valid)
        self.assertEqual(result.errors['email'], {
            'property': 'email',
            'attribute': 'required',
            'message': 'is required',
            'expected': ['name', 'email'],
            'actual': None,
        })
        self.assertEqual(result.message, '"email" is required.')

    def test_type(self):
        result = validate({'name': 1, 'email': 'e'}, schema)

        self.assertEqual(result.errors['name']['attribute'], 'type')
        self.assertEqual(result.errors['name']['actual'], 1)
        self.assertEqual(result.message, '"name" must be of string type.')

    def test_nested(self):
        result = validate({'name': 'n', 'email': 'e', 'address': {'zip': 'x'}}, schema)

        self.assertEqual(sorted(result.errors.keys()), ['address.city', 'address.zip'])
        self.assertEqual(result.errors['address.zip']['message'], 'must be of number type')

    def test_to_dict(self):
        result = validate({}, {'a': {'required': True}})

        self.assertEqual(result.status_code, 400)
        self.assertEqual(result.name, 'ValidationError')
        self.assertEqual(result.to_dict(), {
            'valid': False,
            'errors': {
                'a': {
                    'property': 'a',
                    'attribute': 'required',
                    'message': 'is required',
                    'expected': ['a'],
                    'actual': None,
                },
            },
            'message': '"a" is required.',
            'statusCode': 400,
        })


    # format tests
    # ============

    def test_format_uuid(self):
        uuid_schema = {'id': {'type': 'string', 'format': 'uuid'}}

        for good in [
                '4b7b9e3e-3d4f-4b8e-9e1f-2a3b4c5d6e7f',
                '4B7B9E3E-3D4F-4B8E-9E1F-2A3B4C5D6E7F',
                '0123456789abcdef012345',
        ]:
            self.assertTrue(validate({'id': good}, uuid_schema).valid, good)

        result = validate({'id': 'not-a-uuid'}, uuid_schema)
        self.assertFalse(result.valid)
        self.assertEqual(result.errors['id']['message'], 'is not a valid uuid')
        self.assertEqual(result.message, '"not-a-uuid" is not a valid uuid.')

    def test_format_uuid_anchored(self):
        uuid_schema = {'id': {'type': 'string', 'format': 'uuid'}}
        self.assertFalse(validate({'id': 'x4b7b9e3e-3d4f-4b8e-9e1f-2a3b4c5d6e7f'}, uuid_schema).valid)
        self.assertFalse(validate({'id': '0123456789abcdef0123456'}, uuid_schema).valid)

    def test_format_url(self):
        url_schema = {'site': {'type': 'string', 'format': 'url'}}

        for good in [
                'http://localhost:3000',
                'https://example.com/path/to?x=1&y=2',
                'www.example.com',
                'ftp://files.example.org/pub',
                'http://intranet/',
        ]:
            self.assertTrue(validate({'site': good}, url_schema).valid, good)

        for bad in ['example', 'not a url', 'http://']:
            self.assertFalse(validate({'site': bad}, url_schema).valid, bad)


if __name__ == '__main__':
    unittest.main()
