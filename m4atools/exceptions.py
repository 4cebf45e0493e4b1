class M4AToolsException(Exception):
    '''Base class to extend in order to throw exception in m4atools.

    It takes as first argument the chain of the atoms that the exception
    crossed while propagating, the innermost first.
    '''

    def __init__(self, chain, message=None):
        self.chain = chain
        self.message = message
        super().__init__(message)

    def __str__(self):
        path = '/'.join(reversed(self.chain))
        if not self.message:
            return path

        return f'{path}: {self.message}' if path else self.message


class InvalidFile(M4AToolsException):
    '''The buffer is too short or the atoms don't tile it exactly.'''
    pass


class InvalidBlockType(M4AToolsException):
    '''A top-level atom has a type outside of the known ones.'''
    pass


class MalformedMetadataEntry(M4AToolsException):
    '''The "data" wrapper of a metadata entry failed validation.'''
    pass


class UnsupportedShapeWidth(MalformedMetadataEntry):
    '''The value bytes don't have the width requested by the shape.'''
    pass


class UnrecognizedMetadataIdentifier(M4AToolsException):
    '''Advisory: the metadata container holds an identifier not in the catalogue.'''
    pass


class MetadataContainerAbsent(M4AToolsException):
    '''There is no moov/udta/meta/ilst chain to store a new entry into.'''
    pass
