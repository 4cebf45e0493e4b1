"""
# M4A tools

An MPEG-4 audio file is a sequence of atoms (called boxes by the ISO
specification): each atom has a size, a four characters type and a payload
that for some types is itself a sequence of atoms.

Three main operations are defined

 1. unpack(): read the bytes and build the tree of atoms, failing as a whole
    if the file is not structurally valid.

 2. pack(): encode the tree back into bytes, recomputing the sizes from the
    content; a tree not modified packs to the bytes it was unpacked from.

 3. get/set of the metadata: the values live in the atom

        moov/udta/meta/ilst

    and each value is interpreted following its shape (string, unsigned
    integer of 1, 2, 4 or 8 bytes, pair of u16 or image).

Typical usage

    m4a = M4AFile('song.m4a')
    m4a.get_metadata('title')
    m4a.set_metadata('track_number', (3, 16))
    m4a.write('song.m4a')

"""
