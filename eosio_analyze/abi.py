# standard imports
import os
import json
import logging

# local imports
from eosio_analyze.codec import (
        decode,
        encode,
        MAX_DEPTH,
        )
from eosio_analyze.error import SchemaError

logg = logging.getLogger(__name__)

script_dir = os.path.dirname(os.path.realpath(__file__))
data_dir = os.path.join(script_dir, 'data', 'abi')

ABI_VERSION = 'eosio::abi/1.1'


def _normalize_struct(o):
    return {
        'name': o['name'],
        'base': o.get('base', ''),
        'fields': [{'name': f['name'], 'type': f['type']} for f in o.get('fields', [])],
        }


def _normalize_action(o):
    return {
        'name': o['name'],
        'type': o['type'],
        'ricardian_contract': o.get('ricardian_contract', ''),
        }


def _normalize_table(o):
    return {
        'name': o['name'],
        'index_type': o.get('index_type', ''),
        'key_names': list(o.get('key_names', [])),
        'key_types': list(o.get('key_types', [])),
        'type': o['type'],
        }


def _plural(n, word):
    if n == 1:
        return '1 {}'.format(word)
    return '{} {}s'.format(n, word)


class Abi:
    """Schema document describing how a contract's action payloads and tables are serialized.

    The document is plain data; the indexes built at construction are the only derived state, and neither is changed afterwards.

    :param version: ABI format version string
    :type version: str
    :param types: Typedefs, dicts with new_type_name and type
    :type types: list
    :param structs: Struct definitions, dicts with name, base and fields
    :type structs: list
    :param actions: Action bindings, dicts with name, type and ricardian_contract
    :type actions: list
    :param tables: Table definitions
    :type tables: list
    """
    def __init__(self, version=ABI_VERSION, types=None, structs=None, actions=None, tables=None, ricardian_clauses=None, error_messages=None, abi_extensions=None, variants=None):
        self.version = version
        self.types = list(types or [])
        self.structs = list(structs or [])
        self.actions = list(actions or [])
        self.tables = list(tables or [])
        self.ricardian_clauses = list(ricardian_clauses or [])
        self.error_messages = list(error_messages or [])
        self.abi_extensions = list(abi_extensions or [])
        self.variants = list(variants or [])

        self.__typedefs = {}
        for t in self.types:
            self.__typedefs[t['new_type_name']] = t['type']
        self.__structs = {}
        for s in self.structs:
            self.__structs[s['name']] = s
        self.__actions = {}
        for a in self.actions:
            self.__actions[a['name']] = a['type']
        self.__tables = {}
        for t in self.tables:
            self.__tables[t['name']] = t
        self.__variants = {}
        for v in self.variants:
            self.__variants[v['name']] = v


    def typedef(self, type_name):
        return self.__typedefs.get(type_name)


    def resolve(self, type_name):
        """Follow typedefs until a name that is not a typedef is reached.

        :raises SchemaError: Typedef chain loops or is too long
        """
        for i in range(MAX_DEPTH):
            target = self.__typedefs.get(type_name)
            if target == None:
                return type_name
            type_name = target
        raise SchemaError('typedef chain too long at "{}"'.format(type_name))


    def struct(self, type_name):
        return self.__structs.get(type_name)


    def variant(self, type_name):
        return self.__variants.get(type_name)


    def table(self, table_name):
        return self.__tables.get(table_name)


    def action_type(self, action_name):
        """Type name of the payload for the given action, or None if the action is not declared.
        """
        return self.__actions.get(action_name)


    def summary(self):
        return '{}, {}, {}, {}'.format(
                self.version,
                _plural(len(self.structs), 'struct'),
                _plural(len(self.actions), 'action'),
                _plural(len(self.tables), 'table'),
                )


    def asdict(self):
        return {
            'version': self.version,
            'types': self.types,
            'structs': self.structs,
            'actions': self.actions,
            'tables': self.tables,
            'ricardian_clauses': self.ricardian_clauses,
            'error_messages': self.error_messages,
            'abi_extensions': self.abi_extensions,
            'variants': self.variants,
            }


    def to_bytes(self):
        return encode(self.asdict(), 'abi_def', abi_meta())


    @classmethod
    def from_dict(cls, o):
        """Create a document from its dict form, filling in optional members left out.

        :raises SchemaError: Required members are missing
        """
        try:
            return cls(
                version=o.get('version', ABI_VERSION),
                types=[{'new_type_name': t['new_type_name'], 'type': t['type']} for t in o.get('types', [])],
                structs=[_normalize_struct(s) for s in o.get('structs', [])],
                actions=[_normalize_action(a) for a in o.get('actions', [])],
                tables=[_normalize_table(t) for t in o.get('tables', [])],
                ricardian_clauses=o.get('ricardian_clauses', []),
                error_messages=o.get('error_messages', []),
                abi_extensions=o.get('abi_extensions', []),
                variants=[{'name': v['name'], 'types': list(v['types'])} for v in o.get('variants', [])],
                )
        except (KeyError, TypeError, AttributeError) as e:
            raise SchemaError('invalid abi document: {}'.format(e))


    @classmethod
    def from_bytes(cls, data):
        return interpret(data)


    @classmethod
    def from_file(cls, path):
        f = open(path, 'r')
        o = json.load(f)
        f.close()
        return cls.from_dict(o)


    def __str__(self):
        return 'abi ' + self.summary()


__abi_meta = None


def abi_meta():
    """Schema of the binary ABI format itself, loaded once from package data.
    """
    global __abi_meta
    if __abi_meta == None:
        __abi_meta = Abi.from_file(os.path.join(data_dir, 'abi.abi.json'))
    return __abi_meta


def interpret(data):
    """Decode a binary ABI document, as carried in the payload of a setabi action.

    :param data: Serialized ABI
    :type data: bytes
    :raises DecodeError: ABI bytes are truncated or malformed
    :rtype: Abi
    :returns: ABI document
    """
    o = decode(data, 'abi_def', abi_meta())
    abi = Abi.from_dict(o)
    logg.debug('interpreted {}'.format(abi))
    return abi
