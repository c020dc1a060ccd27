import sass


def process(text, input, packer):
    include_paths = [input.directory]
    include_paths.extend(packer.resolve(root) for root in packer.search)
    return sass.compile(string=text, include_paths=include_paths)
