from rcssmin import cssmin


def process(text, input, packer):
    return cssmin(text)
