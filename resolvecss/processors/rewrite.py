import os


def process(text, input, packer):
    # url() statements are resolved against the directory of the source file, then
    # made relative to wherever the packed asset is written, since that may not live
    # in the same tree as the source.
    if input.asset:
        file_path = os.path.dirname(packer.output_path(input.asset))
    else:
        file_path = input.directory
    transform_value = packer.transformer(file_path)
    return transform_value(text, input.directory)
