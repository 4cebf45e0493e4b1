'''
The atoms keep only a weak reference to their father: the tree is owned
from the top and going upward is just a lookup.
'''


def get_instance_from_atom(instance, condition):
    '''Walk up the fathers until the condition is satisfied, returns None
    if the root is reached without finding it.'''
    while instance is not None:
        if condition(instance):
            return instance

        instance = instance.father

    return None


def get_root_from_atom(instance):
    return get_instance_from_atom(instance, condition=lambda x: x.father is None)


def get_chain_from_atom(instance):
    '''Return the types from the atom up to the root, the innermost first.'''
    chain = []
    while instance is not None:
        chain.append(instance.type)
        instance = instance.father

    return chain
